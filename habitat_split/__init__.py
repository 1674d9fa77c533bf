"""
habitat_split – species occurrence split between two habitats.

Reads two observation tables, counts observations per species, normalizes for
sampling effort, and renders a stacked bar chart of the per-species split.
"""
