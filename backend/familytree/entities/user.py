"""
用户实体
Repository 返回给调用方的内存对象，与 wt_user 表模型分离：
不携带密码哈希，并持有该用户设置的懒加载缓存
"""

from typing import Callable, Dict, Optional


class SettingsCache:
    """
    用户设置缓存，两种状态：unloaded -> loaded（单向）

    不用 None 表示 "尚未加载"，避免与 "已加载但为空" 混淆
    """

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, loader: Callable[[], Dict[str, str]]) -> None:
        """首次访问时调用 loader 拉取全部设置；已加载则什么都不做"""
        if not self._loaded:
            self._values = dict(loader())
            self._loaded = True

    def mark_loaded(self) -> None:
        """直接标记为已加载（空），用于匿名用户"""
        self._loaded = True

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(name, default)

    def contains(self, name: str) -> bool:
        return name in self._values

    def put(self, name: str, value: str) -> None:
        self._values[name] = value

    def discard(self, name: str) -> None:
        self._values.pop(name, None)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)


class User:
    """
    用户实体

    user_id 为 None 或 0 表示匿名访客（未登录）
    修改 user_name / real_name / email 请通过 UserRepository 的 set_* 方法，以便写穿到数据库
    """

    def __init__(
        self,
        user_id: Optional[int],
        user_name: str,
        real_name: str,
        email: str
    ):
        self.user_id = user_id
        self.user_name = user_name
        self.real_name = real_name
        self.email = email
        self.settings = SettingsCache()
        if not user_id:
            # 匿名用户没有设置，永远不查库
            self.settings.mark_loaded()

    @classmethod
    def from_row(cls, row) -> "User":
        """
        从查询结果行构造实体

        Args:
            row: 包含 user_id, user_name, real_name, email 的行
        """
        return cls(
            user_id=row.user_id,
            user_name=row.user_name,
            real_name=row.real_name,
            email=row.email
        )

    @classmethod
    def anonymous(cls) -> "User":
        """匿名访客"""
        return cls(user_id=None, user_name="", real_name="", email="")

    @property
    def is_anonymous(self) -> bool:
        return not self.user_id

    def __repr__(self) -> str:
        return f"User(user_id={self.user_id!r}, user_name={self.user_name!r})"
