import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from authflow.core.config import AuthConfig, load_config, validate_runtime_config
from authflow.core.errors import register_error_handlers
from authflow.database import Base, create_engine_from_config, create_session_factory
from authflow.models import user
from authflow.routes import auth_routes, user_routes
from authflow.services.email import Mailer

logger = logging.getLogger(__name__)

API_PREFIX = '/api/v1/users'


def initialize_database(engine) -> None:
    try:
        Base.metadata.create_all(bind=engine, tables=[user.User.__table__])
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


def create_app(config: AuthConfig | None = None, mailer: Mailer | None = None) -> FastAPI:
    config = config or load_config()
    validate_runtime_config(config)
    logging.basicConfig(level=config.log_level.upper())

    engine = create_engine_from_config(config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        initialize_database(engine)
        yield

    app = FastAPI(title='authflow', lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.mailer = mailer or Mailer(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_error_handlers(app, expose_details=not config.is_production)

    @app.get('/')
    def root():
        return {'status': 'Auth API Running'}

    app.include_router(auth_routes.router, prefix=API_PREFIX)
    app.include_router(user_routes.router, prefix=API_PREFIX)
    return app
