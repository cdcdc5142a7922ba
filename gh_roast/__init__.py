"""
gh-roast: heuristic findings, a score and a verdict for a GitHub user's public repositories.
"""

__version__ = "0.1.0"
