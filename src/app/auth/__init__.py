"""Passo de login: orquestra o provedor de autenticação externo."""

from app.auth.login import AuthSuccess, LoginStepHandler

__all__ = ["AuthSuccess", "LoginStepHandler"]
