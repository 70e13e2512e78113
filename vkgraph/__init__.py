"""
vkgraph - VK social graph crawler backed by Neo4j

Discovers a seed user's followers, subscriptions and groups up to a bounded
depth and merges them into Neo4j without creating duplicates on re-runs.
"""

__version__ = "0.1.0"
