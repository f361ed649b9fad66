import os

from sqlalchemy.engine import URL

DEFAULT_SQLITE_PATH = os.path.join(os.path.dirname(__file__), "..", "instance", "app.db")


def _int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _normalize_db_url(url: str) -> str:
    """Standardize on the psycopg v3 driver."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://") and "+psycopg://" not in url:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _postgres_url(env, user_var: str, password_var: str):
    host = env.get("DB_HOST")
    user = env.get(user_var)
    if not host or not user:
        return None
    query = {"sslmode": env["DB_SSL_MODE"]} if env.get("DB_SSL_MODE") else {}
    return URL.create(
        "postgresql+psycopg",
        username=user,
        password=env.get(password_var) or None,
        host=host,
        port=_int(env.get("DB_PORT"), 5432),
        database=env.get("DB_NAME"),
        query=query,
    ).render_as_string(hide_password=False)


class Config:
    """Settings read from the environment when the app is created."""

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ

        self.SECRET_KEY = env.get("SECRET_KEY", "dev-secret-key")
        self.APP_PORT = _int(env.get("APP_PORT"), 3000)

        # --- Relational store: admin credentials by default, worker for signup ---
        admin_url = env.get("DATABASE_URL")
        admin_url = _normalize_db_url(admin_url) if admin_url else _postgres_url(
            env, "DB_ADMIN_USER", "DB_ADMIN_PASSWORD")
        if not admin_url:
            path = os.path.abspath(DEFAULT_SQLITE_PATH)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            admin_url = f"sqlite:///{path}"
        worker_url = env.get("DATABASE_WORKER_URL")
        worker_url = _normalize_db_url(worker_url) if worker_url else _postgres_url(
            env, "DB_USER", "DB_PASSWORD")

        self.SQLALCHEMY_DATABASE_URI = admin_url
        self.SQLALCHEMY_BINDS = {"worker": worker_url} if worker_url else {}
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_recycle": 300,
        }

        # --- Key-value store ---
        self.REDIS_URL = env.get("REDIS_URL")
        self.REDIS_HOST = env.get("REDIS_HOST", "localhost:6379")
        self.REDIS_PASSWORD = env.get("REDIS_PASSWORD")
        self.REDIS_SESSION_DB = _int(env.get("REDIS_SESSION_DB"))
        self.REDIS_ENTITY_DB = _int(env.get("REDIS_ENTITY_DB"))

        # --- Tokens: only the user secret signs anything today ---
        self.JWT_USER_SECRET_KEY = env.get("JWT_USER_SECRET_KEY")
        self.JWT_GUEST_SECRET_KEY = env.get("JWT_GUEST_SECRET_KEY")
        self.TOKEN_TTL_SECONDS = _int(env.get("TOKEN_TTL_SECONDS"), 86400)
        self.SIGNIN_CODE_TTL_SECONDS = _int(env.get("SIGNIN_CODE_TTL_SECONDS"), 300)
        self.SESSION_TTL_SECONDS = _int(env.get("SESSION_TTL_SECONDS"), 86400)

        # --- Email dispatch ---
        self.SENDGRID_API_KEY = env.get("SENDGRID_API_KEY")
        self.SENDGRID_FROM_ADDRESS = env.get("SENDGRID_FROM_ADDRESS")
        self.SENDGRID_FROM_NAME = env.get("SENDGRID_FROM_NAME", "myLocal")

        # --- CORS, one front-end per route group ---
        self.SIGNUP_CORS_ORIGIN = env.get("SIGNUP_CORS_ORIGIN", "https://signup.mylocal.ing")
        self.SIGNIN_CORS_ORIGIN = env.get("SIGNIN_CORS_ORIGIN", "https://signin.mylocal.ing")
        self.ADMIN_CORS_ORIGIN = env.get("ADMIN_CORS_ORIGIN", "https://admin.mylocal.ing")

        # --- Observability ---
        self.LOG_LEVEL = env.get("LOG_LEVEL", "INFO")
        self.MYLO_LOG_JSON = env.get("MYLO_LOG_JSON", "true")
        self.MYLO_METRICS_ENABLED = env.get("MYLO_METRICS_ENABLED", "true")

        # --- Schema bootstrap ---
        self.MYLO_DB_AUTOCREATE = env.get("MYLO_DB_AUTOCREATE", "false").lower() == "true"
        self.MYLO_DB_MIGRATE_ON_START = env.get("MYLO_DB_MIGRATE_ON_START", "true").lower() == "true"
        self.TESTING = env.get("TESTING", "false").lower() == "true"
