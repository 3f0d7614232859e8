"""NiceGUI web dashboard."""
