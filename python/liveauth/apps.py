from django.apps import AppConfig


class LiveAuthAppConfig(AppConfig):
    name = "liveauth"
    verbose_name = "Live auth forms"

    def ready(self):
        # Import checks module so @register() decorators are executed
        import liveauth.checks  # noqa: F401

        # Settings are final now; pick up LIVEAUTH_CONFIG
        from liveauth.config import config

        config.reset()
