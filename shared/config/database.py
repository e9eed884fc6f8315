import os

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

load_dotenv()

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost") # In Docker, this will be 'postgres'
DB_PORT = os.getenv("POSTGRES_PORT", "5433")
DB_NAME = os.getenv("POSTGRES_DB", "marketplace")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Every service keeps its tables in its own schema
SCHEMAS = ("order_schema", "product_schema", "customer_schema", "notification_schema")

Base = declarative_base()


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """SQLite has no schemas, so they are translated away for local runs and tests."""
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            execution_options={"schema_translate_map": {name: None for name in SCHEMAS}},
        )
    return create_async_engine(url, echo=echo)


engine = create_engine_for(DATABASE_URL, echo=SQL_ECHO)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
