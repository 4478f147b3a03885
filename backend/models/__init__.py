from models.dataplatform import (  # noqa: F401
    PlatformCredentials, Service, ServiceSchema, TableSummary, TableSchema,
    FieldSchema, RelationshipDescriptor, QueryParams, QueryResult, SessionProfile,
)
from models.chat import (  # noqa: F401
    ConversationTurn, ChatResult, ChatRequest, ChatResponse, FinalAnswer, ToolInvocation, ModelReply,
)
from models.auth import LoginRequest, LoginResponse, UserProfile, InitRequest, SuccessResponse  # noqa: F401
from models.search import SearchResponse, OrganicResult, KnowledgeGraph  # noqa: F401
