"""
Django system checks for liveauth.

Registers checks with Django's check framework that also run via
``python manage.py check``. Validates ``LIVEAUTH_CONFIG``:

- E001 -- ``submit_delay`` is not a non-negative number
- E002 -- a configured submission handler cannot be imported
- E003 -- ``channels`` is missing from INSTALLED_APPS
- W001 -- a per-form setting names a form that does not exist
"""

import numbers

from django.core.checks import Error, Warning, register
from django.utils.module_loading import import_string

_PER_FORM_KEYS = ("reset_on_success", "success_urls", "handlers")


@register("liveauth")
def check_configuration(app_configs, **kwargs):
    """Validate LIVEAUTH_CONFIG."""
    from django.conf import settings

    from .forms import form_names

    errors = []
    user_config = getattr(settings, "LIVEAUTH_CONFIG", None) or {}
    known_forms = set(form_names())

    # E001 -- submit_delay must be a non-negative number
    if "submit_delay" in user_config:
        delay = user_config["submit_delay"]
        if isinstance(delay, bool) or not isinstance(delay, numbers.Real) or delay < 0:
            errors.append(
                Error(
                    f"LIVEAUTH_CONFIG['submit_delay'] must be a non-negative number, got {delay!r}.",
                    hint="Use seconds, e.g. 'submit_delay': 1.0",
                    id="liveauth.E001",
                )
            )

    # E002 -- handler paths must import
    for form_name, path in (user_config.get("handlers") or {}).items():
        try:
            import_string(path)
        except ImportError as e:
            errors.append(
                Error(
                    f"Submission handler '{path}' for form '{form_name}' cannot be imported.",
                    hint=str(e),
                    id="liveauth.E002",
                )
            )

    # E003 -- the WebSocket surface needs channels
    installed = list(getattr(settings, "INSTALLED_APPS", []))
    if "channels" not in installed and "daphne" not in installed:
        errors.append(
            Error(
                "'channels' is not in INSTALLED_APPS.",
                hint="liveauth.websocket.AuthFormConsumer requires Django Channels.",
                id="liveauth.E003",
            )
        )

    # W001 -- per-form settings for forms that do not exist
    for key in _PER_FORM_KEYS:
        for form_name in user_config.get(key) or {}:
            if form_name not in known_forms:
                errors.append(
                    Warning(
                        f"LIVEAUTH_CONFIG['{key}'] refers to unknown form '{form_name}'.",
                        hint=f"Known forms: {', '.join(sorted(known_forms))}",
                        id="liveauth.W001",
                    )
                )

    return errors
