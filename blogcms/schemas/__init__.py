"""Request and response schemas."""

from blogcms.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    TokenResponse,
    UserPublic,
)
from blogcms.schemas.category import (
    CategoryCreateRequest,
    CategoryRead,
    CategoryReorderRequest,
    CategoryUpdateRequest,
)
from blogcms.schemas.comment import CommentApprovalRequest, CommentCreateRequest, CommentRead
from blogcms.schemas.health import HealthResponse, ReadinessResponse
from blogcms.schemas.newsletter import SubscribeRequest, SubscribeResponse
from blogcms.schemas.post import (
    BulkDeleteRequest,
    BulkStatusRequest,
    CountResponse,
    PostCreateRequest,
    PostPage,
    PostRead,
    PostStatsResponse,
    PostUpdateRequest,
    PrevNextResponse,
    ViewCountResponse,
)
from blogcms.schemas.setting import (
    PublicSettingsResponse,
    SettingRead,
    SettingType,
    SettingUpdateRequest,
)
from blogcms.schemas.tag import (
    TagCleanupResponse,
    TagCreateRequest,
    TagMergeRequest,
    TagRead,
    TagUpdateRequest,
)
from blogcms.schemas.upload import UploadResponse
from blogcms.schemas.user import (
    ActivityItem,
    ActivityListResponse,
    ChangePasswordRequest,
    MessageResponse,
    ProfileUpdateRequest,
    UserCreateRequest,
    UserDetail,
    UsersListResponse,
    UserUpdateRequest,
)

__all__ = [
    "ActivityItem",
    "ActivityListResponse",
    "BulkDeleteRequest",
    "BulkStatusRequest",
    "CategoryCreateRequest",
    "CategoryRead",
    "CategoryReorderRequest",
    "CategoryUpdateRequest",
    "ChangePasswordRequest",
    "CommentApprovalRequest",
    "CommentCreateRequest",
    "CommentRead",
    "CountResponse",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LogoutResponse",
    "MessageResponse",
    "PostCreateRequest",
    "PostPage",
    "PostRead",
    "PostStatsResponse",
    "PostUpdateRequest",
    "PrevNextResponse",
    "ProfileUpdateRequest",
    "PublicSettingsResponse",
    "ReadinessResponse",
    "RegisterRequest",
    "SettingRead",
    "SettingType",
    "SettingUpdateRequest",
    "SubscribeRequest",
    "SubscribeResponse",
    "TagCleanupResponse",
    "TagCreateRequest",
    "TagMergeRequest",
    "TagRead",
    "TagUpdateRequest",
    "TokenResponse",
    "UploadResponse",
    "UserCreateRequest",
    "UserDetail",
    "UserPublic",
    "UsersListResponse",
    "UserUpdateRequest",
    "ViewCountResponse",
]
