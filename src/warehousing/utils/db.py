from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _register_models(domain: Domain, provider) -> None:
    # Touching ``_dao`` forces each record class to be mapped onto the provider's metadata
    for registry in (domain.registry.aggregates, domain.registry.entities, domain.registry.projections):
        for _, record in registry.items():
            if record.cls.meta_.provider == provider.name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain):
    """Create tables for every SQL-backed provider of ``domain``."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                _register_models(domain, provider)
                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop tables for every SQL-backed provider of ``domain``."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
