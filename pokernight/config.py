import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_ADMIN_PASSWORD = 'poker2025'

class Config:
    """Poker night service configuration settings"""
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///poker.db')
    
    # Server settings
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 3000))
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    
    # Admin settings
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', DEFAULT_ADMIN_PASSWORD)
    ADMIN_TOKEN_TTL_HOURS = float(os.getenv('ADMIN_TOKEN_TTL_HOURS', 24))
    
    # Optional Redis for the cross-process write lock
    REDIS_URL = os.getenv('REDIS_URL')
    WRITE_LOCK_TIMEOUT_SECONDS = 30
    
    @classmethod
    def get_async_database_url(cls) -> str:
        """Get the database URL with an async driver"""
        database_url = cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url
    
    @classmethod
    def uses_default_admin_password(cls) -> bool:
        return cls.ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD
    
    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        if not cls.ADMIN_PASSWORD:
            raise ValueError("ADMIN_PASSWORD must not be empty")
        if cls.ADMIN_TOKEN_TTL_HOURS <= 0:
            raise ValueError("ADMIN_TOKEN_TTL_HOURS must be positive")
        if not 0 < cls.PORT < 65536:
            raise ValueError("PORT must be between 1 and 65535")
