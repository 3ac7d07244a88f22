"""
app/renderers package marker.
"""
