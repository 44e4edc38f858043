import os
from dynaconf import Dynaconf, Validator

# Environment variables are read without a prefix so PORT, DATABASE_PATH and
# GOOGLE_API_KEY work as-is. Nested keys use a double underscore
# (RECORD_STORE__USER_TTL_SECONDS). "store" is reserved by Dynaconf.
settings = Dynaconf(
    envvar_prefix=False,
    settings_files=[
        os.path.join(os.path.dirname(__file__), "settings.json"),
    ],
    load_dotenv=True,
    merge_enabled=True,
    validators=[
        Validator("port", default=5000, cast=int),
        Validator("host", default="0.0.0.0"),
        Validator("ring", default="local"),
        Validator("database_path", must_exist=True),
        Validator("persona.bot_name", "persona.owner_phone", must_exist=True),
        Validator(
            "record_store.user_ttl_seconds",
            "record_store.conversation_ttl_seconds",
            "record_store.sweep_interval_seconds",
            must_exist=True,
            gt=0,
        ),
    ],
)
