"""
Configuration system for liveauth

Provides centralized configuration for:
- Placeholder submission timing
- Per-form behavior after a successful submission (reset, redirect)
- Submission handler wiring
- Error message and log masking policy
"""

import copy
from typing import Any, Dict


class LiveAuthConfig:
    """
    Central configuration for liveauth behavior.

    Usage:
        # In settings.py
        LIVEAUTH_CONFIG = {
            'submit_delay': 0.5,
            'success_urls': {'signin': '/dashboard/', 'signup': '/welcome/'},
            'handlers': {'signin': 'accounts.identity.SignInClient'},
        }

        # Or programmatically
        from liveauth.config import config
        config.set('reset_on_success.signup', True)
    """

    # Default configuration
    _defaults = {
        # Seconds the placeholder submission handler waits before succeeding
        "submit_delay": 1.0,
        # Shown when a handler fails without a usable reason
        "failure_message": "Something went wrong. Please try again.",
        # Include exception type/message in failure text (development only)
        "debug_errors": False,
        # Clear field values after a successful submission, per form name
        "reset_on_success": {
            "signin": True,
            "signup": False,
        },
        # Where the presentation layer should navigate after success, per form name
        "success_urls": {},
        # Dotted paths to submission handler classes, per form name
        "handlers": {},
        # Field name markers whose values are masked in logs
        "sensitive_fields": ["password", "secret", "token"],
        # Largest accepted WebSocket/HTTP payload in bytes (0 disables the check)
        "max_message_size": 65536,
    }

    def __init__(self):
        self._config = copy.deepcopy(self._defaults)
        self._load_from_settings()

    def _load_from_settings(self):
        """Load configuration from Django settings if available"""
        try:
            from django.conf import settings
            from django.core.exceptions import ImproperlyConfigured

            try:
                user_config = getattr(settings, "LIVEAUTH_CONFIG", None)
            except ImproperlyConfigured:
                # Settings not configured yet (e.g. imported outside a project)
                return

            if user_config:
                self._merge(user_config)
        except ImportError:
            pass

    def _merge(self, config_dict: Dict[str, Any]):
        """Merge values into the configuration; per-form dicts merge key by key"""
        for key, value in config_dict.items():
            if isinstance(value, dict) and isinstance(self._config.get(key), dict):
                self._config[key].update(copy.deepcopy(value))
            else:
                self._config[key] = copy.deepcopy(value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (supports dot notation for nested values)
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            config.get('submit_delay')  # 1.0
            config.get('reset_on_success.signin')  # True
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value if value is not None else default

    def set(self, key: str, value: Any):
        """
        Set a configuration value.

        Example:
            config.set('submit_delay', 0)
            config.set('success_urls.signin', '/home/')
        """
        keys = key.split(".")

        target = self._config
        for k in keys[:-1]:
            if k not in target:
                target[k] = {}
            target = target[k]

        target[keys[-1]] = value

    def reset_on_success(self, form_name: str) -> bool:
        """Whether the named form clears its values after a successful submission"""
        return bool(self.get(f"reset_on_success.{form_name}", False))

    def success_url(self, form_name: str):
        return self.get(f"success_urls.{form_name}")

    def reset(self):
        """Reset configuration to defaults"""
        self._config = copy.deepcopy(self._defaults)
        self._load_from_settings()

    def update(self, config_dict: Dict[str, Any]):
        """
        Update multiple configuration values at once.

        Nested dicts are merged, so updating one form's entry keeps the others.
        """
        self._merge(config_dict)

    def as_dict(self) -> Dict[str, Any]:
        """Get the entire configuration as a dictionary"""
        return copy.deepcopy(self._config)


# Global configuration instance
config = LiveAuthConfig()


def get_config() -> LiveAuthConfig:
    """Get the global configuration instance"""
    return config
