from fastapi import status, HTTPException, Depends, APIRouter
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone

from dishka import FromDishka
from dishka.integrations.fastapi import inject

import logging
from redis import asyncio as aioredis

from skillswap.core.interfaces import DirectoryInterface
from ..models.conversation_api_models import UserProfileResponse


class AuthAPI:
    """
    Caller identification for the messaging API.
    Tokens are issued by the platform's identity provider and signed with the
    shared secret; this service only validates them.
    Attributes:
        SECRET_KEY (str): Secret key for JWT token validation
        ALGORITHM (str): JWT signing algorithm (HS256)
        ACCESS_TOKEN_EXPIRE_MINUTES (int): lifetime of tokens minted by create_access_token
        redis (aioredis.Redis): Redis client, checked by the health endpoint
        logger (logging.Logger): Logger instance
        oauth2_scheme (OAuth2PasswordBearer): bearer token extractor
        _auth_router (APIRouter): FastAPI router for identity endpoints
    """
    def __init__(
            self,
            secret_key: str,
            redis: aioredis.Redis,
            logger: logging.Logger
    ):
        self.SECRET_KEY = secret_key
        self.ALGORITHM = "HS256"
        self.ACCESS_TOKEN_EXPIRE_MINUTES: int = 480 # 8 hours
        self.redis = redis
        self.logger = logger
        self.oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login")
        self._auth_router = APIRouter(tags=["Authentication"])
        self._register_endpoints()

    @property
    def auth_router(self) -> APIRouter:
        return self._auth_router

    def get_router(self) -> APIRouter:
        return self._auth_router

    def create_access_token(self, user_id: str) -> str:
        """
        Create a JWT access token, as the identity provider does.
        Args:
            user_id: User ID to include in the token payload
        Returns:
            str: Encoded JWT access token
        """
        try:
            expires_delta = timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)
            expire = datetime.now(timezone.utc) + expires_delta

            payload = {
                "sub": str(user_id),
                "exp": expire,
                "type": "access",
                "iat": datetime.now(timezone.utc)
            }
            return jwt.encode(payload, self.SECRET_KEY, algorithm=self.ALGORITHM)
        except Exception as e:
            self.logger.error("Error creating access token: %s", str(e), exc_info=True)
            raise

    async def get_current_user(self, token: str) -> str:
        """
        Validate JWT token and extract user ID.
        Args:
            token: JWT token string
        Returns:
            str: User ID extracted from token
        Raises:
            HTTPException: If token is invalid, expired, or has wrong type
        """
        try:
            payload = jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])

            if payload.get("type") != "access":
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid token type"
                )

            user_id = payload.get("sub")
            if not user_id:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid authentication credentials",
                )
            return str(user_id)
        except HTTPException:
            raise
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired"
            )
        except JWTError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            ) from e
        except Exception as e:
            self.logger.critical("Error validating token: %s", str(e), exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error"
            )

    def _register_endpoints(self):
        """
        Register identity endpoints:
        - GET /health: Health check
        - GET /me: Get current user's directory profile
        """
        @self.auth_router.get("/health")
        async def health_check():
            """
            Health check endpoint to verify service status and Redis connectivity.
            """
            try:
                await self.redis.ping()
                return {
                    "status": "healthy",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "service": "messaging",
                    "redis": "connected"
                }
            except Exception as e:
                self.logger.error("Health check failed: %s", str(e))
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail="Service unavailable"
                )

        @self.auth_router.get("/me", response_model=UserProfileResponse)
        @inject
        async def get_current_user_info(
                directory: FromDishka[DirectoryInterface],
                token: str = Depends(self.oauth2_scheme)
        ):
            """
            Get current authenticated user's directory profile.
            """
            user_id = await self.get_current_user(token)
            user = await directory.get_user_by_id(user_id)
            if not user:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found"
                )
            return UserProfileResponse(**user.model_dump())
