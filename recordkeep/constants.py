"""
全局常量
系统账户、默认标签集和示例账户
"""

# 系统账户：由 seed_system_account 创建，is_system = True
SYSTEM_USERNAME = "admin"
SYSTEM_EMAIL = "admin@recordkeep.local"
DEFAULT_SYSTEM_PASSWORD = "Admin123!"

# 示例账户共用的初始密码（仅 reset_database 使用）
DEFAULT_SAMPLE_PASSWORD = "Sample123!"

# 标签默认颜色（中性灰）
DEFAULT_LABEL_COLOR = "#CCCCCC"

# 每个新账户都会获得这十个系统标签，顺序固定
DEFAULT_LABELS = (
    ("Default", "#CCCCCC"),
    ("Personal", "#A8E6A3"),
    ("Work", "#4A9EFF"),
    ("Important", "#FF6B6B"),
    ("Later", "#FFD93D"),
    ("Archive", "#B0B0B0"),
    ("Shared", "#96CEB4"),
    ("Private", "#C7A8FF"),
    ("Urgent", "#FF4444"),
    ("Follow-up", "#FFB347"),
)

# (username, email, first_name, last_name)
SAMPLE_ACCOUNTS = (
    ("alice", "alice@recordkeep.dev", "Alice", "Johnson"),
    ("bob", "bob@recordkeep.dev", "Bob", "Smith"),
    ("carol", "carol@recordkeep.dev", "Carol", "Williams"),
)
