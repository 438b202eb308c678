from vibe.sync.git import GitCommandService, GitManager, GitService
from vibe.sync.manager import InitResult, MergeResult, SyncManager, find_rules_dir

__all__ = [
    "GitCommandService",
    "GitManager",
    "GitService",
    "InitResult",
    "MergeResult",
    "SyncManager",
    "find_rules_dir",
]
