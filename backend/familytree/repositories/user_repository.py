"""
用户管理 Repository
提供 wt_user / wt_user_setting 表的增删改查，以及删除用户时对关联表的级联清理
"""

from typing import Dict, List, Optional, Union

from loguru import logger
from sqlalchemy import and_, func, or_
from sqlmodel import Session, col, select

from familytree.core.config import PendingChangePolicy, Settings, settings as default_settings
from familytree.entities.user import User
from familytree.models.activity import ChangeStatus, LogEntry, Message, PendingChange, UserSession
from familytree.models.block import Block, BlockSetting
from familytree.models.tree import Tree, TreeSetting, UserTreeSetting
from familytree.models.user import UserRecord, UserSetting
from familytree.repositories.user_cache import UserCache
from familytree.security.passwords import PasswordHasher

# 约定的设置名
SETTING_CAN_ADMIN = "canadmin"
SETTING_REG_TIMESTAMP = "reg_timestamp"
TREE_SETTING_GEDCOM_ID = "gedcomid"
TREE_USER_REFERENCES = ("CONTACT_USER_ID", "WEBMASTER_USER_ID")

# 构造 User 实体所需的列，不查询密码
_USER_COLUMNS = (UserRecord.user_id, UserRecord.user_name, UserRecord.real_name, UserRecord.email)


class UserRepository:
    """
    用户数据访问对象
    封装所有与 wt_user 表相关的数据库操作

    - 查找结果（包括 "不存在"）缓存在 UserCache 中，同一 ID 只查一次库
    - set_* 方法立即写穿并提交，值未变化时不写库
    - 数据库异常（SQLAlchemyError）原样向上抛出，不重试
    """

    def __init__(
        self,
        session: Session,
        hasher: Optional[PasswordHasher] = None,
        cache: Optional[UserCache] = None,
        settings: Optional[Settings] = None,
        pending_change_policy: Optional[PendingChangePolicy] = None,
        pending_change_owner_id: Optional[int] = None
    ):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
            hasher: 密码哈希器（默认按配置的 bcrypt rounds 创建）
            cache: 用户查找缓存，可在多个 Repository 之间共享
            settings: 配置（默认使用全局配置）
            pending_change_policy: 删除用户时待审核修改的处理策略，默认取配置
            pending_change_owner_id: reassign 策略下接手待审核修改的用户 ID
        """
        self.session = session
        self.settings = settings or default_settings
        self.hasher = hasher or PasswordHasher(self.settings.BCRYPT_ROUNDS)
        self.cache = cache if cache is not None else UserCache()
        self.pending_change_policy = PendingChangePolicy(
            pending_change_policy or self.settings.PENDING_CHANGE_POLICY
        )
        self.pending_change_owner_id = (
            pending_change_owner_id
            if pending_change_owner_id is not None
            else self.settings.PENDING_CHANGE_OWNER_ID
        )
        if self.pending_change_policy == PendingChangePolicy.REASSIGN and self.pending_change_owner_id is None:
            raise ValueError("PENDING_CHANGE_OWNER_ID is required for the 'reassign' pending change policy")

    # ==================== 查找 ====================

    def find_by_id(self, user_id: Optional[int]) -> Optional[User]:
        """
        根据 ID 获取用户

        命中缓存（包括缓存的 "不存在"）时不查库

        Args:
            user_id: 用户 ID

        Returns:
            User 对象，不存在则返回 None
        """
        hit, user = self.cache.lookup(user_id)
        if hit:
            return user

        if user_id is None:
            return None

        statement = select(*_USER_COLUMNS).where(UserRecord.user_id == user_id)
        row = self.session.exec(statement).first()
        user = User.from_row(row) if row else None
        self.cache.store(user_id, user)
        return user

    def find_by_identifier(self, identifier: str) -> Optional[User]:
        """
        根据登录名或邮箱获取用户（精确匹配，大小写取决于数据库排序规则）

        Args:
            identifier: 登录名或邮箱

        Returns:
            User 对象，不存在则返回 None
        """
        statement = select(UserRecord.user_id).where(
            or_(UserRecord.user_name == identifier, UserRecord.email == identifier)
        )
        user_id = self.session.exec(statement).first()
        return self.find_by_id(user_id)

    def find_by_genealogy_record(self, tree: Union[Tree, int], xref: str) -> Optional[User]:
        """
        根据家谱记录获取用户（该用户在这棵树中的 gedcomid 设置等于 xref）

        Args:
            tree: 家谱树或其 gedcom_id
            xref: 个人记录 XREF，例如 "I123"

        Returns:
            User 对象，不存在则返回 None
        """
        tree_id = tree.gedcom_id if isinstance(tree, Tree) else tree
        statement = select(UserTreeSetting.user_id).where(
            UserTreeSetting.gedcom_id == tree_id,
            UserTreeSetting.setting_name == TREE_SETTING_GEDCOM_ID,
            UserTreeSetting.setting_value == xref
        )
        user_id = self.session.exec(statement).first()
        return self.find_by_id(user_id)

    def find_latest_to_register(self) -> Optional[User]:
        """
        获取最近注册的用户

        按 reg_timestamp 设置的字符串值倒序（不做日期解析），
        没有任何用户带注册时间时返回 None
        """
        statement = (
            select(UserRecord.user_id)
            .join(
                UserSetting,
                and_(
                    UserSetting.user_id == UserRecord.user_id,
                    UserSetting.setting_name == SETTING_REG_TIMESTAMP
                )
            )
            .order_by(col(UserSetting.setting_value).desc())
            .limit(1)
        )
        user_id = self.session.exec(statement).first()
        return self.find_by_id(user_id)

    # ==================== 创建与列表 ====================

    def create(self, user_name: str, real_name: str, email: str, password: str) -> User:
        """
        创建新用户

        调用方需要事先检查登录名 / 邮箱是否重复；
        重复时数据库抛出 IntegrityError，会话回滚后原样抛出

        Args:
            user_name: 登录名
            real_name: 显示名
            email: 邮箱
            password: 明文密码（只保存哈希）

        Returns:
            创建的 User 对象
        """
        record = UserRecord(
            user_name=user_name,
            real_name=real_name,
            email=email,
            password=self.hasher.hash(password)
        )
        self.session.add(record)
        try:
            self.session.flush()
            user_id = record.user_id
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        # 该 ID 之前可能被缓存为 "不存在"
        self.cache.evict(user_id)
        logger.info(f"[UserRepository] Created user '{user_name}' (ID: {user_id})")
        return self.find_by_identifier(user_name)

    def count(self) -> int:
        """真实用户数量（不含 user_id <= 0 的哨兵账户）"""
        statement = select(func.count()).select_from(UserRecord).where(col(UserRecord.user_id) > 0)
        return self.session.exec(statement).one()

    def all(self) -> List[User]:
        """所有真实用户，按登录名排序"""
        statement = (
            select(*_USER_COLUMNS)
            .where(col(UserRecord.user_id) > 0)
            .order_by(col(UserRecord.user_name))
        )
        return [self._hydrate(row) for row in self.session.exec(statement).all()]

    def all_admins(self) -> List[User]:
        """所有管理员（canadmin 设置为 "1"）"""
        statement = (
            select(*_USER_COLUMNS)
            .join(UserSetting, UserSetting.user_id == UserRecord.user_id)
            .where(
                col(UserRecord.user_id) > 0,
                UserSetting.setting_name == SETTING_CAN_ADMIN,
                UserSetting.setting_value == "1"
            )
            .order_by(col(UserRecord.user_name))
        )
        return [self._hydrate(row) for row in self.session.exec(statement).all()]

    def all_logged_in(self) -> List[User]:
        """所有当前在线的用户（持有会话记录），去重"""
        statement = (
            select(*_USER_COLUMNS)
            .join(UserSession, UserSession.user_id == UserRecord.user_id)
            .where(col(UserRecord.user_id) > 0)
            .distinct()
            .order_by(col(UserRecord.user_name))
        )
        return [self._hydrate(row) for row in self.session.exec(statement).all()]

    # ==================== 密码 ====================

    def check_password(self, user: User, password: str) -> bool:
        """
        校验密码

        副作用：校验成功且存储的哈希参数已过期（例如 bcrypt rounds 调整过）时，
        会用当前参数重新哈希并写库，然后再返回 True

        Args:
            user: 用户
            password: 明文密码

        Returns:
            匹配返回 True；不匹配、用户不存在或匿名用户返回 False
        """
        if user.is_anonymous:
            return False

        statement = select(UserRecord.password).where(UserRecord.user_id == user.user_id)
        password_hash = self.session.exec(statement).first()
        if password_hash is None or not self.hasher.verify(password, password_hash):
            return False

        if self.hasher.needs_rehash(password_hash):
            logger.info(f"[UserRepository] Rehashing outdated password hash for user {user.user_id}")
            self.set_password(user, password)
        return True

    def set_password(self, user: User, password: str) -> User:
        """
        设置密码

        总是写库：明文不保留，无法判断 "是否变化"
        """
        record = self._get_record(user)
        if record:
            record.password = self.hasher.hash(password)
            self.session.add(record)
            self._commit()
        return user

    # ==================== 基础属性 ====================

    def set_user_name(self, user: User, user_name: str) -> User:
        """修改登录名，未变化时不写库"""
        return self._set_attribute(user, "user_name", user_name)

    def set_real_name(self, user: User, real_name: str) -> User:
        """修改显示名，未变化时不写库"""
        return self._set_attribute(user, "real_name", real_name)

    def set_email(self, user: User, email: str) -> User:
        """修改邮箱，未变化时不写库"""
        return self._set_attribute(user, "email", email)

    # ==================== 用户设置 ====================

    def get_setting(self, user: User, setting_name: str, default: Optional[str] = None) -> Optional[str]:
        """
        读取用户设置

        每个用户的设置不多，且通常会读取好几个，
        所以首次访问时一次性拉取该用户的全部设置

        Args:
            user: 用户
            setting_name: 设置名
            default: 不存在时的默认值

        Returns:
            设置值，不存在则返回 default
        """
        user.settings.load(lambda: self._load_settings(user.user_id))
        return user.settings.get(setting_name, default)

    def set_setting(self, user: User, setting_name: str, setting_value: Optional[str]) -> User:
        """
        写入用户设置

        - setting_value 为 None：删除该设置
        - 值未变化：不写库
        - 超过列宽的值截断后写入

        匿名用户只修改内存中的设置
        """
        if setting_value is not None:
            setting_value = str(setting_value)[:self.settings.USER_SETTING_MAX_LENGTH]

        if user.is_anonymous:
            if setting_value is None:
                user.settings.discard(setting_name)
            else:
                user.settings.put(setting_name, setting_value)
            return user

        user.settings.load(lambda: self._load_settings(user.user_id))

        if setting_value is None:
            setting = self.session.get(UserSetting, (user.user_id, setting_name))
            if setting:
                self.session.delete(setting)
                self._commit()
            user.settings.discard(setting_name)
            return user

        if user.settings.contains(setting_name) and user.settings.get(setting_name) == setting_value:
            return user

        setting = self.session.get(UserSetting, (user.user_id, setting_name))
        if setting:
            setting.setting_value = setting_value
        else:
            setting = UserSetting(user_id=user.user_id, setting_name=setting_name, setting_value=setting_value)
        self.session.add(setting)
        self._commit()
        user.settings.put(setting_name, setting_value)
        return user

    # ==================== 删除 ====================

    def delete(self, user: User) -> None:
        """
        删除用户（级联清理关联表）

        所有步骤在同一个事务中执行，任何一步失败都整体回滚后抛出。
        依赖行先于 wt_user 行删除，避免外键冲突或留下悬空 ID：

        1. 日志保留，只把 user_id 置空
        2. 删除该用户已被接受的待审核修改
        3. 其余待审核修改按 pending_change_policy 处理
        4. 删除该用户首页块的设置，再删除块
        5. 删除该用户在各家谱树中的设置
        6. 删除指向该用户的树设置（联系人 / 站长）
        7. 删除用户设置、站内消息、登录会话
        8. 删除用户本身

        匿名用户没有对应的行，直接返回
        """
        if user.is_anonymous:
            return

        user_id = user.user_id
        try:
            counts = {
                "logs": self._detach_logs(user_id),
                "accepted_changes": self._delete_rows(
                    select(PendingChange).where(
                        PendingChange.user_id == user_id,
                        PendingChange.status == ChangeStatus.ACCEPTED
                    )
                ),
                "pending_changes": self._apply_pending_change_policy(user_id),
                "block_settings": self._delete_rows(
                    select(BlockSetting)
                    .join(Block, Block.block_id == BlockSetting.block_id)
                    .where(Block.user_id == user_id)
                ),
                "blocks": self._delete_rows(select(Block).where(Block.user_id == user_id)),
                "tree_settings": self._delete_rows(
                    select(UserTreeSetting).where(UserTreeSetting.user_id == user_id)
                ),
                "tree_references": self._delete_rows(
                    select(TreeSetting).where(
                        TreeSetting.setting_value == str(user_id),
                        col(TreeSetting.setting_name).in_(TREE_USER_REFERENCES)
                    )
                ),
                "settings": self._delete_rows(select(UserSetting).where(UserSetting.user_id == user_id)),
                "messages": self._delete_rows(select(Message).where(Message.user_id == user_id)),
                "sessions": self._delete_rows(select(UserSession).where(UserSession.user_id == user_id)),
                "user": self._delete_rows(select(UserRecord).where(UserRecord.user_id == user_id)),
            }
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"[UserRepository] Failed to delete user {user_id}, rolled back: {e}")
            raise

        self.cache.evict(user_id)
        logger.info(f"[UserRepository] Deleted user '{user.user_name}' (ID: {user_id})")
        logger.debug(f"[UserRepository] Cascade for user {user_id}: {counts}")

    # ==================== 内部方法 ====================

    def _hydrate(self, row) -> User:
        """优先复用缓存中的实体，保证同一 ID 在本 Repository 内只有一个对象"""
        hit, user = self.cache.lookup(row.user_id)
        if hit and user is not None:
            return user
        user = User.from_row(row)
        self.cache.store(row.user_id, user)
        return user

    def _get_record(self, user: User) -> Optional[UserRecord]:
        if user.is_anonymous:
            return None
        return self.session.get(UserRecord, user.user_id)

    def _set_attribute(self, user: User, name: str, value: str) -> User:
        """修改 wt_user 中的一列并同步内存对象"""
        if getattr(user, name) == value:
            return user

        record = self._get_record(user)
        if record:
            setattr(record, name, value)
            self.session.add(record)
            self._commit()
        # 提交成功后才修改内存对象
        setattr(user, name, value)
        return user

    def _load_settings(self, user_id: int) -> Dict[str, str]:
        statement = select(UserSetting.setting_name, UserSetting.setting_value).where(
            UserSetting.user_id == user_id
        )
        return {name: value for name, value in self.session.exec(statement).all()}

    def _commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def _delete_rows(self, statement) -> int:
        """删除查询到的所有行（不提交），返回删除数量"""
        rows = self.session.exec(statement).all()
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)

    def _detach_logs(self, user_id: int) -> int:
        entries = self.session.exec(select(LogEntry).where(LogEntry.user_id == user_id)).all()
        for entry in entries:
            entry.user_id = None
            self.session.add(entry)
        self.session.flush()
        return len(entries)

    def _apply_pending_change_policy(self, user_id: int) -> int:
        """处理被删除用户剩余的（未被接受的）待审核修改，返回受影响的数量"""
        statement = select(PendingChange).where(PendingChange.user_id == user_id)

        if self.pending_change_policy == PendingChangePolicy.DELETE:
            return self._delete_rows(statement)

        changes = self.session.exec(statement).all()
        if self.pending_change_policy == PendingChangePolicy.REASSIGN:
            for change in changes:
                change.user_id = self.pending_change_owner_id
                self.session.add(change)
            self.session.flush()
        return len(changes)
