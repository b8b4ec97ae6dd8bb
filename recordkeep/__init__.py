"""
recordkeep - 用户、备忘、标签与联系人的 SQLite 持久化核心
"""

__version__ = "0.1.0"
