"""
app/sheets package marker.
"""
