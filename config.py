import os


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(os.getcwd(), "instance", "odonto.db"),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # --- Autenticação (token Bearer) ---
    REQUIRE_LOGIN = _flag("REQUIRE_LOGIN", "true")
    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_MINUTES = int(os.environ.get("JWT_EXPIRES_MINUTES", "480"))
    # Rota pública de criação do primeiro admin; desliga sozinha após a 1ª conta
    ALLOW_ADMIN_BOOTSTRAP = _flag("ALLOW_ADMIN_BOOTSTRAP", "true")
    PASSWORD_MIN_LENGTH = 6
    MAX_FAILED_LOGINS = 5
    LOCKOUT_MINUTES = 15
    # --- Uploads ---
    # None => <instance>/uploads
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER")
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024
    # --- Listagens ---
    DEFAULT_PAGE_LIMIT = 10
    PACIENTES_PAGE_LIMIT = 1000  # tela de pacientes carrega todos
    MAX_PAGE_LIMIT = 1000
    # CPF: formato sempre validado; dígitos verificadores opcional
    VALIDATE_CPF_CHECK_DIGITS = _flag("VALIDATE_CPF_CHECK_DIGITS", "false")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    # --- Schema ---
    AUTO_CREATE_TABLES = True
    AUTO_ALEMBIC_UPGRADE = False  # não executar upgrade automático ao iniciar
    # --- SQLite sob escrita concorrente ---
    SQLITE_BUSY_TIMEOUT_MS = int(os.environ.get("SQLITE_BUSY_TIMEOUT_MS", "1000"))
    SQLITE_BUSY_RETRIES = 2  # re-execuções da unidade de trabalho
    SQLITE_BUSY_BACKOFF = 0.1
