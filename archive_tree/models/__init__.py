from archive_tree.models.post import Post  # noqa: F401
from archive_tree.models.activity_log import ActivityLog  # noqa: F401
