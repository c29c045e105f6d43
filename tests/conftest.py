import pytest
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from .models import Article, Author, Base, Book, Tag, Translation


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def queries(engine):
    statements = []

    def before_cursor_execute(conn, cursor, statement, *args):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    yield statements
    event.remove(engine, "before_cursor_execute", before_cursor_execute)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        python = Tag(id=1, name="python")
        sql = Tag(id=2, name="sql", enabled=False)
        forms = Tag(id=3, name="forms")

        tolstoy = Author(id=1, name="Tolstoy")

        session.add_all(
            [
                python,
                sql,
                forms,
                Article(id=1, title="Intro", tags=[python, forms]),
                tolstoy,
                Book(id=1, title="War and Peace", author=tolstoy),
                Translation(language="en", key="hello", text="Hello"),
                Translation(language="fr", key="hello", text="Bonjour"),
            ]
        )
        session.commit()

        yield session


@pytest.fixture
def tags(session):
    query = select(Tag).order_by(Tag.id)
    return {tag.name: tag for tag in session.scalars(query)}


@pytest.fixture
def scoped_entity_manager(engine, session):
    registry = scoped_session(sessionmaker(bind=engine))
    yield registry
    registry.remove()
