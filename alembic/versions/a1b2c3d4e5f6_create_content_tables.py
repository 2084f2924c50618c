"""create content tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _content_columns() -> list:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("thumbnail_image_url", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("save_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    ]


def _content_indexes(table: str) -> None:
    op.create_index(op.f(f"ix_{table}_id"), table, ["id"])
    op.create_index(op.f(f"ix_{table}_title"), table, ["title"])
    op.create_index(op.f(f"ix_{table}_slug"), table, ["slug"], unique=True)
    op.create_index(op.f(f"ix_{table}_category"), table, ["category"])
    op.create_index(op.f(f"ix_{table}_author_id"), table, ["author_id"])
    op.create_index(f"idx_{table}_published", table, ["is_published", "created_at"])


def _pair_table(name: str, left: str, left_table: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(left, sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint([left], [f"{left_table}.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(left, "user_id", name=f"uq_{name}_{left.removesuffix('_id')}_user"),
    )
    op.create_index(op.f(f"ix_{name}_{left}"), name, [left])
    op.create_index(op.f(f"ix_{name}_user_id"), name, ["user_id"])


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("role", sa.Enum("user", "admin", name="roleenum"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tags_id"), "tags", ["id"])
    op.create_index(op.f("ix_tags_name"), "tags", ["name"], unique=True)
    op.create_index(op.f("ix_tags_slug"), "tags", ["slug"])

    op.create_table(
        "classes",
        *_content_columns(),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("content_mdx", sa.Text(), nullable=False),
        sa.Column("cover_image_urls", sa.JSON(), nullable=False),
    )
    _content_indexes("classes")

    op.create_table(
        "galleries",
        *_content_columns(),
        sa.Column("subtitle", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("image_urls", sa.JSON(), nullable=False),
    )
    _content_indexes("galleries")

    op.create_table(
        "news",
        *_content_columns(),
        sa.Column("content_mdx", sa.Text(), nullable=False),
        sa.Column("visibility", sa.Enum("PUBLIC", "MEMBER", name="newsvisibility"), nullable=False),
        sa.Column("cover_image_urls", sa.JSON(), nullable=False),
    )
    _content_indexes("news")

    op.create_table(
        "class_tags",
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("class_id", "tag_id"),
    )
    op.create_table(
        "gallery_tags",
        sa.Column("gallery_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["gallery_id"], ["galleries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("gallery_id", "tag_id"),
    )

    # Comments and engagement
    op.create_table(
        "class_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["class_comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_class_comments_id"), "class_comments", ["id"])
    op.create_index(op.f("ix_class_comments_class_id"), "class_comments", ["class_id"])
    op.create_index(op.f("ix_class_comments_user_id"), "class_comments", ["user_id"])
    op.create_index(op.f("ix_class_comments_parent_id"), "class_comments", ["parent_id"])
    op.create_index("ix_class_comments_class_parent", "class_comments", ["class_id", "parent_id"])
    op.create_index("ix_class_comments_parent_created", "class_comments", ["parent_id", "created_at"])

    _pair_table("comment_likes", "comment_id", "class_comments")
    _pair_table("class_likes", "class_id", "classes")
    _pair_table("class_saves", "class_id", "classes")


def downgrade() -> None:
    for table in ("class_saves", "class_likes", "comment_likes", "class_comments", "gallery_tags", "class_tags"):
        op.drop_table(table)

    for table in ("news", "galleries", "classes"):
        op.drop_index(f"idx_{table}_published", table_name=table)
        op.drop_table(table)

    op.drop_table("tags")
    op.drop_table("users")

    sa.Enum(name="newsvisibility").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="roleenum").drop(op.get_bind(), checkfirst=True)
