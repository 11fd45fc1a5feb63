import base64
import binascii
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import and_, create_engine, delete, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from booknotion.client.gateway import ApiError, ApiGateway
from booknotion.client.storage import LEGACY_DB_KEY, ClientStorage
from booknotion.core.errors import AppError, ValidationError
from booknotion.db.base import Base, utcnow
from booknotion.db.models import Notebook as NotebookModel
from booknotion.db.models import Section as SectionModel
from booknotion.db.models import User as UserModel
from booknotion.db.repositories.notebook_repository import LIKE_ESCAPE, like_pattern
from booknotion.domains.notebooks.entities import COPY_SUFFIX
from booknotion.domains.notebooks.schemas import (
    NotebookCreate, NotebookDuplicate, NotebookResponse, NotebookUpdate,
    SectionCreate, SectionResponse
)
from booknotion.domains.notebooks.services import notebook_not_found, section_not_found

logger = logging.getLogger(__name__)

LOCAL_USERNAME = "local"
LOCAL_EMAIL = "local@localhost"
UNSORTED_SECTION = "Unsorted"


class NotebookStore(ABC):
    """Хранилище разделов и тетрадей: сервер или локальный файл"""

    @abstractmethod
    def list_sections(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def create_section(self, name: str) -> Dict[str, Any]: ...

    @abstractmethod
    def update_section(self, section_id: int, name: str) -> Dict[str, Any]: ...

    @abstractmethod
    def delete_section(self, section_id: int) -> int:
        """Удаляет раздел с тетрадями, возвращает число удаленных тетрадей"""

    @abstractmethod
    def list_notebooks(self, section_id: Optional[int] = None) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def get_notebook(self, notebook_id: int) -> Dict[str, Any]: ...

    @abstractmethod
    def create_notebook(self, name: str, section_id: int, content: str = "") -> Dict[str, Any]: ...

    @abstractmethod
    def update_notebook(
        self,
        notebook_id: int,
        name: Optional[str] = None,
        content: Optional[str] = None,
        section_id: Optional[int] = None,
    ) -> Dict[str, Any]: ...

    @abstractmethod
    def update_notebook_content(self, notebook_id: int, content: str) -> str:
        """Автосохранение, возвращает новое updated_at"""

    @abstractmethod
    def delete_notebook(self, notebook_id: int) -> None: ...

    @abstractmethod
    def duplicate_notebook(
        self,
        notebook_id: int,
        name: Optional[str] = None,
        section_id: Optional[int] = None,
    ) -> Dict[str, Any]: ...

    @abstractmethod
    def search_notebooks(
        self, query: str, section_id: Optional[int] = None
    ) -> List[Dict[str, Any]]: ...


class RemoteStore(NotebookStore):
    """Данные на сервере через ApiGateway"""

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    def list_sections(self):
        return self.gateway.get_sections()

    def create_section(self, name):
        return self.gateway.create_section(name)

    def update_section(self, section_id, name):
        return self.gateway.update_section(section_id, name)["section"]

    def delete_section(self, section_id):
        return self.gateway.delete_section(section_id)["deletedNotebooks"]

    def list_notebooks(self, section_id=None):
        if section_id is not None:
            return self.gateway.get_section_notebooks(section_id)
        return self.gateway.get_notebooks()

    def get_notebook(self, notebook_id):
        return self.gateway.get_notebook(notebook_id)

    def create_notebook(self, name, section_id, content=""):
        return self.gateway.create_notebook(name, section_id, content)

    def update_notebook(self, notebook_id, name=None, content=None, section_id=None):
        data = self.gateway.update_notebook(
            notebook_id, name=name, content=content, section_id=section_id
        )
        return data["notebook"]

    def update_notebook_content(self, notebook_id, content):
        return self.gateway.update_notebook_content(notebook_id, content)["updated_at"]

    def delete_notebook(self, notebook_id):
        self.gateway.delete_notebook(notebook_id)

    def duplicate_notebook(self, notebook_id, name=None, section_id=None):
        return self.gateway.duplicate_notebook(notebook_id, name, section_id)["notebook"]

    def search_notebooks(self, query, section_id=None):
        return self.gateway.search_notebooks(query, section_id)


def _api_error(error: AppError) -> ApiError:
    """Ошибка локального хранилища в том же виде, что и ответ сервера"""
    data = error.to_dict()
    return ApiError(error.code, error.message or error.error, error.status_code, data)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return utcnow()
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return utcnow()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class LocalStore(NotebookStore):
    """Встроенная база SQLite на диске клиента.

    Таблицы те же, что и на сервере; все данные принадлежат одному
    локальному пользователю. Ошибки поднимаются как ApiError с теми же
    кодами и статусами, что отдает сервер.
    """

    def __init__(self, path: str, storage: Optional[ClientStorage] = None):
        self.path = os.path.expanduser(path)
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        is_new = not os.path.exists(self.path)

        self.engine = create_engine(f"sqlite:///{self.path}", future=True)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

        self.user_id = self._ensure_local_user()

        if is_new and storage is not None:
            self._migrate_legacy(storage)

    def close(self) -> None:
        self.engine.dispose()

    def _ensure_local_user(self) -> int:
        with self.session_factory() as session:
            user = session.execute(
                select(UserModel).where(UserModel.username == LOCAL_USERNAME)
            ).scalar_one_or_none()
            if user is None:
                # Вход по паролю для локального пользователя невозможен
                user = UserModel(username=LOCAL_USERNAME, email=LOCAL_EMAIL, password_hash="!")
                session.add(user)
                session.commit()
            return user.id

    # --- миграция со старого формата ---

    def _migrate_legacy(self, storage: ClientStorage) -> None:
        """Разовый перенос base64 образа базы старого клиента"""
        blob = storage.get(LEGACY_DB_KEY)
        if not blob:
            return

        try:
            raw = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Legacy database is not valid base64, skipping migration: {e}")
            return

        fd, legacy_path = tempfile.mkstemp(suffix=".db")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(raw)
            sections, notebooks = self._import_legacy(legacy_path)
        except SQLAlchemyError as e:
            logger.error(f"Legacy database could not be read, skipping migration: {e}")
            return
        finally:
            os.remove(legacy_path)

        storage.remove(LEGACY_DB_KEY)
        logger.info(
            f"Migrated {sections} sections and {notebooks} notebooks from legacy storage"
        )

    def _import_legacy(self, legacy_path: str):
        legacy_engine = create_engine(f"sqlite:///{legacy_path}", future=True)
        try:
            with legacy_engine.connect() as conn:
                legacy_sections = conn.execute(
                    text("SELECT id, name, created_at, updated_at FROM sections")
                ).mappings().all()
                legacy_notebooks = conn.execute(
                    text(
                        "SELECT id, name, content, section_id, created_at, updated_at "
                        "FROM notebooks"
                    )
                ).mappings().all()
        finally:
            legacy_engine.dispose()

        with self.session_factory() as session:
            # Старые текстовые id разделов -> новые числовые
            section_ids: Dict[Any, int] = {}
            for row in legacy_sections:
                section = SectionModel(
                    name=row["name"],
                    user_id=self.user_id,
                    created_at=_parse_timestamp(row["created_at"]),
                    updated_at=_parse_timestamp(row["updated_at"]),
                )
                session.add(section)
                session.flush()
                section_ids[row["id"]] = section.id

            for row in legacy_notebooks:
                section_id = section_ids.get(row["section_id"])
                if section_id is None:
                    if None not in section_ids:
                        unsorted = SectionModel(name=UNSORTED_SECTION, user_id=self.user_id)
                        session.add(unsorted)
                        session.flush()
                        section_ids[None] = unsorted.id
                    section_id = section_ids[None]

                session.add(NotebookModel(
                    name=row["name"],
                    content=row["content"] or "",
                    section_id=section_id,
                    user_id=self.user_id,
                    created_at=_parse_timestamp(row["created_at"]),
                    updated_at=_parse_timestamp(row["updated_at"]),
                ))
            session.commit()

        return len(legacy_sections), len(legacy_notebooks)

    # --- вспомогательное ---

    @staticmethod
    def _validate(schema, **values):
        try:
            return schema(**values)
        except SchemaValidationError as e:
            first = e.errors()[0]
            raise _api_error(ValidationError(first.get("msg", "Invalid value")))

    def _get_section(self, session, section_id: int, message: str = "Section not found"):
        section = session.execute(
            select(SectionModel).where(
                and_(SectionModel.id == section_id, SectionModel.user_id == self.user_id)
            )
        ).scalar_one_or_none()
        if section is None:
            raise _api_error(section_not_found(message))
        return section

    def _get_notebook(self, session, notebook_id: int):
        notebook = session.execute(
            select(NotebookModel).where(
                and_(NotebookModel.id == notebook_id, NotebookModel.user_id == self.user_id)
            )
        ).scalar_one_or_none()
        if notebook is None:
            raise _api_error(notebook_not_found())
        return notebook

    @staticmethod
    def _section_dict(section: SectionModel) -> Dict[str, Any]:
        return SectionResponse.model_validate(section).model_dump(mode="json")

    @staticmethod
    def _notebook_dict(notebook: NotebookModel) -> Dict[str, Any]:
        return NotebookResponse.model_validate(notebook).model_dump(mode="json")

    # --- разделы ---

    def list_sections(self):
        with self.session_factory() as session:
            sections = session.execute(
                select(SectionModel)
                .where(SectionModel.user_id == self.user_id)
                .order_by(SectionModel.created_at.desc(), SectionModel.id.desc())
            ).scalars().all()
            return [self._section_dict(s) for s in sections]

    def create_section(self, name):
        data = self._validate(SectionCreate, name=name)
        with self.session_factory() as session:
            section = SectionModel(name=data.name, user_id=self.user_id)
            session.add(section)
            session.commit()
            return self._section_dict(section)

    def update_section(self, section_id, name):
        data = self._validate(SectionCreate, name=name)
        with self.session_factory() as session:
            section = self._get_section(session, section_id)
            section.name = data.name
            section.updated_at = utcnow()
            session.commit()
            return self._section_dict(section)

    def delete_section(self, section_id):
        with self.session_factory() as session:
            self._get_section(session, section_id)

            notebooks_result = session.execute(
                delete(NotebookModel).where(
                    and_(
                        NotebookModel.section_id == section_id,
                        NotebookModel.user_id == self.user_id,
                    )
                )
            )
            session.commit()

            session.execute(
                delete(SectionModel).where(
                    and_(SectionModel.id == section_id, SectionModel.user_id == self.user_id)
                )
            )
            session.commit()

        logger.info(
            f"Deleted local section {section_id} with {notebooks_result.rowcount} notebooks"
        )
        return notebooks_result.rowcount

    # --- тетради ---

    def list_notebooks(self, section_id=None):
        with self.session_factory() as session:
            query = select(NotebookModel).where(NotebookModel.user_id == self.user_id)
            if section_id is not None:
                self._get_section(session, section_id)
                query = query.where(NotebookModel.section_id == section_id)
            notebooks = session.execute(
                query.order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
            ).scalars().all()
            return [self._notebook_dict(n) for n in notebooks]

    def get_notebook(self, notebook_id):
        with self.session_factory() as session:
            return self._notebook_dict(self._get_notebook(session, notebook_id))

    def create_notebook(self, name, section_id, content=""):
        data = self._validate(NotebookCreate, name=name, section_id=section_id, content=content)
        with self.session_factory() as session:
            self._get_section(session, data.section_id)
            notebook = NotebookModel(
                name=data.name,
                content=data.content,
                section_id=data.section_id,
                user_id=self.user_id,
            )
            session.add(notebook)
            session.commit()
            return self._notebook_dict(notebook)

    def update_notebook(self, notebook_id, name=None, content=None, section_id=None):
        data = self._validate(NotebookUpdate, name=name, content=content, section_id=section_id)
        with self.session_factory() as session:
            notebook = self._get_notebook(session, notebook_id)
            if data.section_id is not None and data.section_id != notebook.section_id:
                self._get_section(session, data.section_id)
                notebook.section_id = data.section_id
            if data.name is not None:
                notebook.name = data.name
            if data.content is not None:
                notebook.content = data.content
            notebook.updated_at = utcnow()
            session.commit()
            return self._notebook_dict(notebook)

    def update_notebook_content(self, notebook_id, content):
        if content is None:
            raise _api_error(ValidationError("Content is required"))
        with self.session_factory() as session:
            self._get_notebook(session, notebook_id)
            session.execute(
                update(NotebookModel)
                .where(
                    and_(NotebookModel.id == notebook_id, NotebookModel.user_id == self.user_id)
                )
                .values(content=content, updated_at=utcnow())
            )
            session.commit()
            notebook = self._get_notebook(session, notebook_id)
            return self._notebook_dict(notebook)["updated_at"]

    def delete_notebook(self, notebook_id):
        with self.session_factory() as session:
            notebook = self._get_notebook(session, notebook_id)
            session.delete(notebook)
            session.commit()

    def duplicate_notebook(self, notebook_id, name=None, section_id=None):
        data = self._validate(NotebookDuplicate, name=name, section_id=section_id)
        with self.session_factory() as session:
            source = self._get_notebook(session, notebook_id)
            target_section_id = (
                data.section_id if data.section_id is not None else source.section_id
            )
            self._get_section(session, target_section_id, message="Target section not found")

            copy = NotebookModel(
                name=data.name or f"{source.name}{COPY_SUFFIX}",
                content=source.content,
                section_id=target_section_id,
                user_id=self.user_id,
            )
            session.add(copy)
            session.commit()
            return self._notebook_dict(copy)

    def search_notebooks(self, query, section_id=None):
        query = (query or "").strip()
        if not query:
            raise _api_error(ValidationError("Search term is required"))

        pattern = like_pattern(query)
        statement = select(NotebookModel).where(
            and_(
                NotebookModel.user_id == self.user_id,
                or_(
                    NotebookModel.name.ilike(pattern, escape=LIKE_ESCAPE),
                    NotebookModel.content.ilike(pattern, escape=LIKE_ESCAPE),
                ),
            )
        )
        if section_id is not None:
            statement = statement.where(NotebookModel.section_id == section_id)

        with self.session_factory() as session:
            notebooks = session.execute(
                statement.order_by(NotebookModel.updated_at.desc(), NotebookModel.id.desc())
            ).scalars().all()
            return [self._notebook_dict(n) for n in notebooks]


def open_store(
    gateway: ApiGateway, storage: ClientStorage, path: Optional[str] = None
) -> NotebookStore:
    """RemoteStore, если сервер отвечает, иначе LocalStore"""
    if gateway.ping():
        logger.info(f"Using remote store at {gateway.base_url}")
        return RemoteStore(gateway)

    path = path or gateway.settings.local_db_path
    logger.warning(f"API is unreachable, using local store at {path}")
    return LocalStore(path, storage)
