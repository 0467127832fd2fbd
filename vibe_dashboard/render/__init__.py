"""
Rendering for Vibe Dashboard.

Turns processed usage data into a Markdown fragment and an SVG card.
"""
