from typing import Optional, Dict, Any

from fastapi import HTTPException, status
from supabase import create_client, Client

from core.integrations.supabase.settings import settings
from core.common.log import logger


def _identity(user: Any) -> Dict[str, Any]:
    """Supabase User 对象 -> 普通字典"""
    metadata = dict(getattr(user, "user_metadata", None) or {})
    return {
        "id": str(user.id),
        "email": (user.email or "").lower(),
        "user_metadata": metadata,
    }


def _session(session: Any) -> Dict[str, Any]:
    return {
        "access_token": session.access_token,
        "refresh_token": getattr(session, "refresh_token", None),
        "expires_in": getattr(session, "expires_in", None),
    }


class SupabaseAuthManager:
    """Supabase 认证管理器

    - 后台账号：邮箱 + 密码
    - 读者：邮箱 OTP / Google ID Token
    - service role：创建/删除后台账号、重置密码
    """

    def __init__(self) -> None:
        self.url: str = settings.url
        self.anon_key: str = settings.anon_key
        self.service_key: str = settings.service_key
        self.client: Optional[Client] = None
        self.service_client: Optional[Client] = None
        self._initialized: bool = False

    def init(self) -> None:
        """初始化 Supabase 客户端"""
        if not self.url or not self.anon_key:
            raise ValueError("SUPABASE_URL 和 SUPABASE_ANON_KEY 环境变量必须设置")

        if self._initialized and self.client is not None:
            return

        try:
            self.client = create_client(self.url, self.anon_key)
            if self.service_key:
                self.service_client = create_client(self.url, self.service_key)

            self._initialized = True
            logger.info("Supabase 认证客户端初始化成功")

        except Exception as e:
            logger.error(f"Supabase 认证客户端初始化失败: {e}")
            raise

    def get_client(self, use_service: bool = False) -> Client:
        """获取 Supabase 客户端"""
        if not self._initialized:
            self.init()

        if use_service:
            if self.service_client is None:
                raise RuntimeError("Supabase 服务客户端尚未成功初始化")
            return self.service_client

        if self.client is None:
            raise RuntimeError("Supabase 匿名客户端尚未成功初始化")

        return self.client

    def _fresh_client(self) -> Client:
        # 登录类调用会把会话写进客户端实例，每次新建避免并发请求串号
        if not self.url or not self.anon_key:
            raise ValueError("SUPABASE_URL 和 SUPABASE_ANON_KEY 环境变量必须设置")
        return create_client(self.url, self.anon_key)

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """后台用户登录（邮箱 + 密码）"""
        try:
            auth_response = self._fresh_client().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.warning(f"用户登录失败: {email} {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        if not auth_response.user or not auth_response.session:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        logger.info(f"用户登录成功: {email}")
        return {
            "user": _identity(auth_response.user),
            "session": _session(auth_response.session),
        }

    async def send_email_otp(self, email: str) -> None:
        """发送读者登录验证码（读者不存在时由 Supabase 自动创建）"""
        try:
            self._fresh_client().auth.sign_in_with_otp(
                {"email": email, "options": {"should_create_user": True}}
            )
            logger.info(f"验证码已发送: {email}")
        except Exception as e:
            logger.error(f"发送验证码失败: {email} {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to send verification code",
            )

    async def verify_email_otp(self, email: str, otp: str) -> Dict[str, Any]:
        """校验读者邮箱验证码"""
        try:
            auth_response = self._fresh_client().auth.verify_otp(
                {"email": email, "token": otp, "type": "email"}
            )
        except Exception as e:
            logger.warning(f"验证码校验失败: {email} {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired verification code",
            )

        if not auth_response.user or not auth_response.session:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired verification code",
            )
        return {
            "user": _identity(auth_response.user),
            "session": _session(auth_response.session),
        }

    async def sign_in_with_google(self, id_token: str) -> Dict[str, Any]:
        """使用 Google ID Token 登录"""
        try:
            auth_response = self._fresh_client().auth.sign_in_with_id_token(
                {"provider": "google", "token": id_token}
            )
        except Exception as e:
            logger.warning(f"Google 登录失败: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Google authentication failed",
            )

        if not auth_response.user or not auth_response.session:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Google authentication failed",
            )
        return {
            "user": _identity(auth_response.user),
            "session": _session(auth_response.session),
        }

    async def get_user_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        """根据 Access Token 获取用户身份，无效时返回 None"""
        try:
            response = self.get_client().auth.get_user(token)
            if not response or not getattr(response, "user", None):
                return None
            return _identity(response.user)

        except Exception as e:
            logger.warning(f"获取用户信息失败: {e}")
            return None

    #! 以下为 service role 管理接口

    async def admin_create_user(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """创建后台账号（跳过邮箱确认）"""
        try:
            response = self.get_client(use_service=True).auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata or {},
                }
            )
            return _identity(response.user)
        except Exception as e:
            logger.error(f"创建认证账号失败: {email} {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Failed to create account: {e}",
            )

    async def admin_update_user(self, auth_id: str, attributes: Dict[str, Any]) -> None:
        """更新认证账号（密码 / 邮箱）"""
        try:
            self.get_client(use_service=True).auth.admin.update_user_by_id(
                auth_id, attributes
            )
        except Exception as e:
            logger.error(f"更新认证账号失败: {auth_id} {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Failed to update account: {e}",
            )

    async def admin_delete_user(self, auth_id: str) -> None:
        try:
            self.get_client(use_service=True).auth.admin.delete_user(auth_id)
        except Exception as e:
            logger.error(f"删除认证账号失败: {auth_id} {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Failed to delete account: {e}",
            )


# 全局认证管理器实例
auth_manager = SupabaseAuthManager()
