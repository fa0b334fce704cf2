from .auth_api import AuthAPI
from .request_api import RequestAPI
from .conversation_api import ConversationAPI
from .message_api import MessageAPI
from .notification_api import NotificationAPI
