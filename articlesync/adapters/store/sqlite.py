"""SQLite article store adapter.

Implements ArticleStorePort and MediaStorePort using SQLite with aiosqlite
for async access. Table layout follows the storefront schema the import
format was designed for (s_articles, s_articles_details, ...).
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiosqlite

from articlesync.core.errors import StorageError
from articlesync.core.models import (
    ArticleEntry,
    ArticleImage,
    DetailKind,
    Media,
    PriceEntry,
    RelationKind,
    StoredDetail,
    Supplier,
)
from articlesync.core.ports import (
    ArticleStorePort,
    ArticleStoreSession,
    MediaStorePort,
)

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS s_articles_supplier (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        description TEXT,
        supplierID INTEGER REFERENCES s_articles_supplier(id),
        taxID INTEGER,
        active INTEGER NOT NULL DEFAULT 1,
        main_detail_id INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        ordernumber TEXT UNIQUE NOT NULL,
        kind INTEGER NOT NULL DEFAULT 1,
        instock INTEGER NOT NULL DEFAULT 0,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_media (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        path TEXT NOT NULL,
        extension TEXT,
        mime_type TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_img (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        img TEXT NOT NULL,
        main INTEGER NOT NULL DEFAULT 0,
        description TEXT NOT NULL DEFAULT '',
        position INTEGER NOT NULL DEFAULT 1,
        extension TEXT NOT NULL DEFAULT '',
        media_id INTEGER REFERENCES s_media(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_prices (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        articledetailsID INTEGER NOT NULL REFERENCES s_articles_details(id) ON DELETE CASCADE,
        pricegroup TEXT NOT NULL,
        from_qty INTEGER NOT NULL DEFAULT 1,
        to_qty INTEGER,
        price REAL NOT NULL,
        pseudoprice REAL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        description TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        categoryID INTEGER NOT NULL REFERENCES s_categories(id),
        UNIQUE (articleID, categoryID)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_similar (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        relatedarticle INTEGER NOT NULL REFERENCES s_articles(id),
        UNIQUE (articleID, relatedarticle)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_relationships (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        relatedarticle INTEGER NOT NULL REFERENCES s_articles(id),
        UNIQUE (articleID, relatedarticle)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_filter_options (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_filter_values (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        optionID INTEGER NOT NULL REFERENCES s_filter_options(id),
        value TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_filter_articles (
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        valueID INTEGER NOT NULL REFERENCES s_filter_values(id),
        PRIMARY KEY (articleID, valueID)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_articles_translations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        articleID INTEGER NOT NULL REFERENCES s_articles(id) ON DELETE CASCADE,
        languageID INTEGER NOT NULL,
        name TEXT,
        description TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_article_configurator_groups (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_article_configurator_options (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        group_id INTEGER NOT NULL REFERENCES s_article_configurator_groups(id),
        name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS s_article_configurator_option_relations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        article_id INTEGER NOT NULL REFERENCES s_articles_details(id) ON DELETE CASCADE,
        option_id INTEGER NOT NULL REFERENCES s_article_configurator_options(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_details_article ON s_articles_details(articleID)",
    "CREATE INDEX IF NOT EXISTS idx_img_article ON s_articles_img(articleID)",
    "CREATE INDEX IF NOT EXISTS idx_prices_detail ON s_articles_prices(articledetailsID)",
)

# Export queries per section. `{ids}` is replaced with placeholders.
EXPORT_QUERIES: dict[str, str] = {
    "article": """
        SELECT a.id AS "article.id", a.name AS "article.name",
               a.description AS "article.description", a.active AS "article.active",
               a.taxID AS "article.taxId", s.id AS "supplier.id", s.name AS "supplier.name",
               d.id AS "variant.id", d.ordernumber AS "variant.number",
               d.kind AS "variant.kind", d.instock AS "variant.inStock",
               d.active AS "variant.active", md.ordernumber AS "mainVariant.number"
        FROM s_articles_details d
        JOIN s_articles a ON a.id = d.articleID
        LEFT JOIN s_articles_supplier s ON s.id = a.supplierID
        LEFT JOIN s_articles_details md ON md.id = a.main_detail_id
        WHERE a.id IN ({ids})
        ORDER BY a.id, d.kind, d.id
    """,
    "price": """
        SELECT p.id AS "prices.id", p.articleID AS "prices.articleId",
               p.articledetailsID AS "prices.articleDetailsId",
               p.pricegroup AS "prices.customerGroupKey", p.from_qty AS "prices.from",
               p.to_qty AS "prices.to", p.price AS "prices.price",
               p.pseudoprice AS "prices.pseudoPrice"
        FROM s_articles_prices p
        WHERE p.articleID IN ({ids})
        ORDER BY p.articledetailsID, p.pricegroup, p.from_qty
    """,
    "image": """
        SELECT i.id AS "images.id", i.articleID AS "images.articleId",
               i.img AS "images.path", i.extension AS "images.extension",
               i.main AS "images.main", i.description AS "images.description",
               i.position AS "images.position", i.media_id AS "images.mediaId"
        FROM s_articles_img i
        WHERE i.articleID IN ({ids})
        ORDER BY i.articleID, i.position, i.id
    """,
    "propertyValue": """
        SELECT fa.articleID AS "article.id", v.id AS "propertyValue.id",
               v.value AS "propertyValue.value", o.name AS "propertyOption.name"
        FROM s_filter_articles fa
        JOIN s_filter_values v ON v.id = fa.valueID
        JOIN s_filter_options o ON o.id = v.optionID
        WHERE fa.articleID IN ({ids})
        ORDER BY fa.articleID, o.id, v.id
    """,
    "similar": """
        SELECT r.relatedarticle AS "similar.id", r.articleID AS "similar.articleId",
               rd.ordernumber AS "similarDetail.number"
        FROM s_articles_similar r
        JOIN s_articles ra ON ra.id = r.relatedarticle
        LEFT JOIN s_articles_details rd ON rd.id = ra.main_detail_id
        WHERE r.articleID IN ({ids})
        ORDER BY r.articleID, r.id
    """,
    "accessory": """
        SELECT r.relatedarticle AS "accessory.id", r.articleID AS "accessory.articleId",
               rd.ordernumber AS "accessoryDetail.number"
        FROM s_articles_relationships r
        JOIN s_articles ra ON ra.id = r.relatedarticle
        LEFT JOIN s_articles_details rd ON rd.id = ra.main_detail_id
        WHERE r.articleID IN ({ids})
        ORDER BY r.articleID, r.id
    """,
    "category": """
        SELECT c.id AS "categories.id", ac.articleID AS "categories.articleId",
               c.description AS "categories.name"
        FROM s_articles_categories ac
        JOIN s_categories c ON c.id = ac.categoryID
        WHERE ac.articleID IN ({ids})
        ORDER BY ac.articleID, c.id
    """,
    "translation": """
        SELECT t.articleID AS "article.id", t.languageID AS "translation.languageId",
               t.name AS "translation.name", t.description AS "translation.description"
        FROM s_articles_translations t
        WHERE t.articleID IN ({ids})
        ORDER BY t.articleID, t.languageID
    """,
    "configurator": """
        SELECT d.id AS "variant.id", d.ordernumber AS "variant.number",
               g.name AS "configuratorGroup.name", o.name AS "configuratorOption.name"
        FROM s_article_configurator_option_relations rel
        JOIN s_articles_details d ON d.id = rel.article_id
        JOIN s_article_configurator_options o ON o.id = rel.option_id
        JOIN s_article_configurator_groups g ON g.id = o.group_id
        WHERE d.articleID IN ({ids})
        ORDER BY d.id, g.id
    """,
}

_RELATION_TABLES = {
    RelationKind.SIMILAR: "s_articles_similar",
    RelationKind.ACCESSORY: "s_articles_relationships",
}


class SQLiteArticleSession(ArticleStoreSession):
    """Store operations bound to one connection inside a transaction."""

    def __init__(self, conn: aiosqlite.Connection):
        self.conn = conn

    async def get_detail_by_order_number(self, order_number: str) -> StoredDetail | None:
        cursor = await self.conn.execute(
            """
            SELECT d.id, d.articleID, d.ordernumber, d.kind, a.supplierID
            FROM s_articles_details d
            JOIN s_articles a ON a.id = d.articleID
            WHERE d.ordernumber = ?
            """,
            (order_number,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return StoredDetail(
            id=row[0],
            article_id=row[1],
            order_number=row[2],
            kind=DetailKind(row[3]),
            supplier_id=row[4],
        )

    async def get_supplier_by_id(self, supplier_id: int) -> Supplier | None:
        cursor = await self.conn.execute(
            "SELECT id, name FROM s_articles_supplier WHERE id = ?", (supplier_id,)
        )
        row = await cursor.fetchone()
        return Supplier(id=row[0], name=row[1]) if row else None

    async def get_supplier_by_name(self, name: str) -> Supplier | None:
        cursor = await self.conn.execute(
            "SELECT id, name FROM s_articles_supplier WHERE name = ?", (name,)
        )
        row = await cursor.fetchone()
        return Supplier(id=row[0], name=row[1]) if row else None

    async def create_supplier(self, name: str) -> Supplier:
        # A concurrent writer may have created the same name since the lookup
        await self.conn.execute(
            "INSERT INTO s_articles_supplier (name) VALUES (?) ON CONFLICT(name) DO NOTHING",
            (name,),
        )
        async with self.conn.execute(
            "SELECT id, name FROM s_articles_supplier WHERE name = ?", (name,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            raise StorageError(f"Supplier {name!r} could not be created")
        return Supplier(id=row[0], name=row[1])

    async def insert_article(
        self, entry: ArticleEntry, supplier_id: int
    ) -> StoredDetail:
        cursor = await self.conn.execute(
            """
            INSERT INTO s_articles (name, description, supplierID, taxID, active)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                entry.name,
                entry.description,
                supplier_id,
                entry.tax_id,
                _flag(entry.active, default=True),
            ),
        )
        article_id = cursor.lastrowid
        detail_id = await self._insert_detail(article_id, entry, DetailKind.MAIN)
        await self.conn.execute(
            "UPDATE s_articles SET main_detail_id = ? WHERE id = ?",
            (detail_id, article_id),
        )
        return StoredDetail(
            id=detail_id,
            article_id=article_id,
            order_number=entry.order_number,
            kind=DetailKind.MAIN,
            supplier_id=supplier_id,
        )

    async def insert_variant(
        self, article_id: int, entry: ArticleEntry
    ) -> StoredDetail:
        cursor = await self.conn.execute(
            "SELECT supplierID FROM s_articles WHERE id = ?", (article_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            raise StorageError(f"Article {article_id} does not exist")
        detail_id = await self._insert_detail(article_id, entry, DetailKind.VARIANT)
        return StoredDetail(
            id=detail_id,
            article_id=article_id,
            order_number=entry.order_number,
            kind=DetailKind.VARIANT,
            supplier_id=row[0],
        )

    async def _insert_detail(
        self, article_id: int, entry: ArticleEntry, kind: DetailKind
    ) -> int:
        try:
            cursor = await self.conn.execute(
                """
                INSERT INTO s_articles_details (articleID, ordernumber, kind, instock, active)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    article_id,
                    entry.order_number,
                    kind.value,
                    entry.in_stock or 0,
                    _flag(entry.active, default=True),
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise StorageError(f"Order number {entry.order_number} already exists") from e
        return cursor.lastrowid

    async def update_article(
        self,
        detail: StoredDetail,
        entry: ArticleEntry,
        supplier_id: int | None,
    ) -> None:
        article_fields: dict[str, Any] = {}
        if entry.name is not None:
            article_fields["name"] = entry.name
        if entry.description is not None:
            article_fields["description"] = entry.description
        if entry.tax_id is not None:
            article_fields["taxID"] = entry.tax_id
        if entry.active is not None:
            article_fields["active"] = _flag(entry.active)
        if supplier_id is not None:
            article_fields["supplierID"] = supplier_id
        await self._update("s_articles", detail.article_id, article_fields)

        detail_fields: dict[str, Any] = {}
        if entry.in_stock is not None:
            detail_fields["instock"] = entry.in_stock
        if entry.active is not None:
            detail_fields["active"] = _flag(entry.active)
        await self._update("s_articles_details", detail.id, detail_fields)

    async def _update(self, table: str, row_id: int, fields: dict[str, Any]) -> None:
        if not fields:
            return
        # Column names come from the fixed mappings above, never from input
        assignments = ", ".join(f"{column} = ?" for column in fields)
        await self.conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            (*fields.values(), row_id),
        )

    async def count_images(self, article_id: int) -> int:
        cursor = await self.conn.execute(
            "SELECT COUNT(*) FROM s_articles_img WHERE articleID = ?", (article_id,)
        )
        return (await cursor.fetchone())[0]

    async def insert_image(self, article_id: int, image: ArticleImage) -> int:
        cursor = await self.conn.execute(
            """
            INSERT INTO s_articles_img
            (articleID, img, main, description, position, extension, media_id)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                article_id,
                image.path,
                _flag(image.main),
                image.description,
                image.position,
                image.extension,
                image.media_id,
            ),
        )
        return cursor.lastrowid

    async def find_image(self, article_id: int, media_id: int) -> int | None:
        async with self.conn.execute(
            "SELECT id FROM s_articles_img WHERE articleID = ? AND media_id = ? ORDER BY id",
            (article_id, media_id),
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def update_image(
        self,
        image_id: int,
        image: ArticleImage,
        keep_main: bool = False,
        keep_position: bool = False,
    ) -> None:
        fields: dict[str, Any] = {"img": image.path, "extension": image.extension}
        if image.description:
            fields["description"] = image.description
        if not keep_main:
            fields["main"] = _flag(image.main)
        if not keep_position:
            fields["position"] = image.position
        await self._update("s_articles_img", image_id, fields)

    async def replace_prices(
        self,
        detail: StoredDetail,
        customer_group: str,
        prices: Sequence[PriceEntry],
    ) -> None:
        await self.conn.execute(
            "DELETE FROM s_articles_prices WHERE articledetailsID = ? AND pricegroup = ?",
            (detail.id, customer_group),
        )
        await self.conn.executemany(
            """
            INSERT INTO s_articles_prices
            (articleID, articledetailsID, pricegroup, from_qty, to_qty, price, pseudoprice)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    detail.article_id,
                    detail.id,
                    customer_group,
                    price.from_quantity,
                    price.to_quantity,
                    float(price.price),
                    float(price.pseudo_price) if price.pseudo_price is not None else None,
                )
                for price in prices
            ],
        )

    async def category_exists(self, category_id: int) -> bool:
        cursor = await self.conn.execute(
            "SELECT 1 FROM s_categories WHERE id = ?", (category_id,)
        )
        return await cursor.fetchone() is not None

    async def link_category(self, article_id: int, category_id: int) -> None:
        await self.conn.execute(
            "INSERT OR IGNORE INTO s_articles_categories (articleID, categoryID) VALUES (?, ?)",
            (article_id, category_id),
        )

    async def article_exists(self, article_id: int) -> bool:
        cursor = await self.conn.execute(
            "SELECT 1 FROM s_articles WHERE id = ?", (article_id,)
        )
        return await cursor.fetchone() is not None

    async def link_relation(
        self, article_id: int, related_article_id: int, kind: RelationKind
    ) -> None:
        table = _RELATION_TABLES[kind]
        await self.conn.execute(
            f"INSERT OR IGNORE INTO {table} (articleID, relatedarticle) VALUES (?, ?)",
            (article_id, related_article_id),
        )


class SQLiteArticleStore(ArticleStorePort, MediaStorePort):
    """SQLite-backed article and media store with connection pooling."""

    def __init__(self, db_path: str, pool_size: int = 5):
        """Initialize SQLite store with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of connections to maintain in the pool.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._schema_lock = asyncio.Lock()
        # SQLite allows one writer at a time; transactions of this store queue here
        self._write_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._schema_initialized = False

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()
        try:
            conn = await aiosqlite.connect(str(self.db_path))
            await conn.execute("PRAGMA foreign_keys = ON")
        except aiosqlite.Error as e:
            raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
        return conn

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
                return
        await conn.close()

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        """
        if self._schema_initialized:
            return

        async with self._schema_lock:
            if self._schema_initialized:
                return

            conn = await self._get_connection()
            try:
                await conn.execute("PRAGMA journal_mode = WAL")
                for statement in SCHEMA:
                    await conn.execute(statement)
                await conn.commit()
                self._schema_initialized = True
            except aiosqlite.Error as e:
                raise StorageError(f"Schema initialization failed: {e}") from e
            finally:
                await self._return_connection(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[ArticleStoreSession]:
        """Open a transaction committed on success, rolled back on error.

        Transactions of one store instance run one after another, so
        concurrent writes never interleave their select-then-insert steps.
        """
        await self._init_schema()

        async with self._write_lock:
            conn = await self._get_connection()
            try:
                try:
                    yield SQLiteArticleSession(conn)
                except BaseException:
                    await conn.rollback()
                    raise
                await conn.commit()
            except aiosqlite.Error as e:
                logger.error(f"Store transaction failed: {e}")
                raise StorageError(f"Store transaction failed: {e}") from e
            finally:
                await self._return_connection(conn)

    async def fetch_rows(
        self, entity_type: str, article_ids: Sequence[int]
    ) -> list[dict[str, Any]]:
        """Fetch export rows keyed by qualified column name."""
        query = EXPORT_QUERIES.get(entity_type)
        if query is None:
            raise ValueError(f"Unknown export section: {entity_type}")
        if not article_ids:
            return []

        await self._init_schema()
        placeholders = ", ".join("?" for _ in article_ids)

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                query.format(ids=placeholders), tuple(article_ids)
            )
            names = [description[0] for description in cursor.description]
            rows = await cursor.fetchall()
            return [dict(zip(names, row)) for row in rows]
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to read {entity_type} rows: {e}") from e
        finally:
            await self._return_connection(conn)

    async def list_article_ids(
        self,
        offset: int = 0,
        limit: int | None = None,
        category_id: int | None = None,
    ) -> list[int]:
        await self._init_schema()

        query = "SELECT a.id FROM s_articles a"
        params: list[Any] = []
        if category_id is not None:
            query += (
                " JOIN s_articles_categories ac"
                " ON ac.articleID = a.id AND ac.categoryID = ?"
            )
            params.append(category_id)
        # SQLite only accepts OFFSET together with LIMIT; -1 means no limit
        query += " ORDER BY a.id LIMIT ? OFFSET ?"
        params.extend([limit if limit is not None else -1, offset])

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(query, params)
            return [row[0] for row in await cursor.fetchall()]
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to list article ids: {e}") from e
        finally:
            await self._return_connection(conn)

    async def get_media(self, media_id: int) -> Media | None:
        """Look up a stored media file by id."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            async with conn.execute(
                "SELECT id, name, path, extension, mime_type FROM s_media WHERE id = ?",
                (media_id,),
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to read media {media_id}: {e}") from e
        finally:
            await self._return_connection(conn)

        if row is None:
            return None
        return Media(id=row[0], name=row[1], path=row[2], extension=row[3], mime_type=row[4])


def _flag(value: bool | None, default: bool = False) -> int:
    if value is None:
        value = default
    return 1 if value else 0
