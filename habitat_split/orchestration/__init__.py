"""
End-to-end pipeline wiring: load → aggregate → merge → normalize → render.
"""
