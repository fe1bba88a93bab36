"""
Scoring core: validation, aggregation, group lifecycle, submissions
"""
