import os

# Headless chart rendering for the plotting tests
os.environ.setdefault("MPLBACKEND", "Agg")
