"""
PATH: users/models/user.py

CUSTOM USER MODEL

- Email is the login identity (SimpleJWT obtains tokens by email + password).
- username is optional and auto-derived from the email local-part.
- role drives capabilities (see permissions/roles.py).
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def _derive_username(self, email: str) -> str:
        base = (email.split("@")[0] or "user").strip().lower()
        candidate = base
        i = 1
        while self.model.objects.filter(username__iexact=candidate).exists():
            i += 1
            candidate = f"{base}{i}"
        return candidate

    def create_user(self, email=None, password=None, **extra_fields):
        """
        Supports:
        - create_user(email="a@b.com", password="x", role="cashier")
        - create_user(username="cashier", password="x")  (email becomes <username>@local.test)
        """
        username = (extra_fields.pop("username", "") or "").strip()
        email = (email or "").strip()

        if not email and not username:
            raise ValueError("Provide at least email or username")

        if not email:
            email = f"{username.lower()}@local.test"

        email = self.normalize_email(email)
        if not username:
            username = self._derive_username(email)

        extra_fields.setdefault("is_active", True)

        user = self.model(email=email, username=username, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Superuser must have an email")
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", User.ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_ADMIN = "admin"
    ROLE_MANAGER = "manager"
    ROLE_CASHIER = "cashier"
    ROLE_VIEWER = "viewer"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_CASHIER, "Cashier"),
        (ROLE_VIEWER, "Viewer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_VIEWER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        if self.username is not None:
            self.username = self.username.strip() or None

        if not self.email:
            raise ValidationError("User must have an email")

    def __str__(self):
        ident = self.username or self.email
        return f"{ident} ({self.role})"
