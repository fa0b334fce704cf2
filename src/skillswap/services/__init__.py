from .routers import AuthAPI, RequestAPI, ConversationAPI, MessageAPI, NotificationAPI
