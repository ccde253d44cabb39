"""
用户查找缓存
user_id -> User（或 "查无此人"），每个 ID 最多查一次库
"""

from typing import Dict, Optional, Tuple

from familytree.entities.user import User


class UserCache:
    """
    显式的用户查找缓存

    没有自动淘汰，也不会感知其他进程 / 会话对数据库的修改：
    需要时由调用方 evict 或 clear。
    同一个实例可以在一次请求内的多个 Repository 之间共享。
    """

    def __init__(self):
        self._entries: Dict[Optional[int], Optional[User]] = {}

    def lookup(self, user_id: Optional[int]) -> Tuple[bool, Optional[User]]:
        """
        查询缓存

        Returns:
            (是否命中, User 或 None)。命中且为 None 表示缓存了 "不存在"
        """
        if user_id in self._entries:
            return True, self._entries[user_id]
        return False, None

    def store(self, user_id: Optional[int], user: Optional[User]) -> None:
        """缓存查找结果，包括 "不存在"（user 为 None）"""
        self._entries[user_id] = user

    def evict(self, user_id: Optional[int]) -> None:
        """移除单个 ID 的缓存"""
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        """清空缓存"""
        self._entries.clear()

    def __contains__(self, user_id: Optional[int]) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
