"""Historical series: window selection and statistical overlay.

- window.py: absolute/relative time windows, record selection and projection
- summary.py: mean/median/std-dev bands and latest-value percentile
"""
