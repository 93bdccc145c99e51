# core/supabase_auth.py
# DRF authentication class that verifies Supabase access tokens

import logging
import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("sciencehub.auth")

User = get_user_model()


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Custom authentication class that validates Supabase JWTs.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the token signature using the Supabase JWT secret
    3. Looks up or creates a Django user keyed by the token subject
    """
    keyword = "Bearer"

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith(f"{self.keyword} "):
            return None  # Let other auth backends handle it

        token = auth_header.split(" ", 1)[1].strip()

        secret = settings.SUPABASE_JWT_SECRET
        if not secret:
            logger.warning("SUPABASE_JWT_SECRET not configured")
            return None

        try:
            # Supabase uses HS256 by default
            payload = jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience=settings.SUPABASE_JWT_AUDIENCE,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Invalid Supabase token: %s", e)
            return None  # Let other auth backends try

        supabase_uid = payload.get("sub")
        if not supabase_uid:
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = self._get_or_create_user(supabase_uid, payload.get("email"))
        if not user.is_active:
            raise AuthenticationFailed("User is inactive")

        return (user, payload)

    def authenticate_header(self, request):
        # Makes DRF answer 401 (not 403) for missing credentials
        return f'{self.keyword} realm="api"'

    def _get_or_create_user(self, supabase_uid: str, email: str | None):
        """
        Map a Supabase identity onto a Django user.

        The token subject is the stable key; email links accounts that
        existed before their first Supabase login.
        """
        user = User.objects.filter(supabase_uid=supabase_uid).first()
        if user:
            return user

        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = User.objects.filter(email__iexact=email).first()
        if user:
            if not user.supabase_uid:
                user.supabase_uid = supabase_uid
                user.save(update_fields=["supabase_uid"])
            return user

        username = email.split("@")[0]
        # Ensure unique username
        base_username = username
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base_username}_{counter}"
            counter += 1

        try:
            with transaction.atomic():
                user = User.objects.create(
                    username=username,
                    email=email,
                    supabase_uid=supabase_uid,
                    # Password is not used for Supabase auth
                )
        except IntegrityError:
            # Concurrent first request for the same identity
            return User.objects.get(supabase_uid=supabase_uid)

        user.set_unusable_password()
        user.save(update_fields=["password"])
        logger.info("Created new user from Supabase: %s", email)
        return user
