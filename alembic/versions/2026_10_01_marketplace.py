from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TSVECTOR

revision = "2026_10_01_marketplace"
down_revision = None
branch_labels = None
depends_on = None

property_type = sa.Enum("apartment", "house", "studio", "bedsitter", "maisonette", "penthouse", name="propertytype")
lease_term = sa.Enum("monthly", "quarterly", "yearly", name="leaseterm")
user_role = sa.Enum("landlord", "tenant", "admin", name="userrole")
message_type = sa.Enum("inquiry", "response", "general", name="messagetype")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="tenant"),
        sa.Column("profile_image", sa.String(500), nullable=False, server_default=""),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("properties", JSONB, nullable=False, server_default="[]"),
        sa.Column("favorites", JSONB, nullable=False, server_default="[]"),
        sa.Column("preferred_locations", JSONB, nullable=False, server_default="[]"),
        sa.Column("max_budget", sa.Float),
        sa.Column("rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("review_count", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "properties",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("location_area", sa.String(255), nullable=False),
        sa.Column("location_city", sa.String(100), nullable=False, server_default="Nairobi"),
        sa.Column("location_address", sa.String(255), nullable=False),
        sa.Column("location_lat", sa.Float),
        sa.Column("location_lng", sa.Float),
        sa.Column("property_type", property_type, nullable=False),
        sa.Column("bedrooms", sa.Integer, nullable=False),
        sa.Column("bathrooms", sa.Integer, nullable=False),
        sa.Column("size", sa.Float, nullable=False),
        sa.Column("amenities", JSONB, nullable=False, server_default="[]"),
        sa.Column("images", JSONB, nullable=False, server_default="[]"),
        sa.Column("virtual_tour", sa.String(500)),
        sa.Column("landlord_id", sa.String(32), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("view_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("favorite_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lease_term", lease_term, nullable=False, server_default="monthly"),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("contact_phone", sa.String(50), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("available_from", sa.Date, nullable=False),
        sa.Column("reports", JSONB, nullable=False, server_default="[]"),
        sa.Column("rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("review_count", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.Column("fts", TSVECTOR),
    )
    op.create_index("ix_properties_landlord_id", "properties", ["landlord_id"])
    op.create_index("ix_properties_created_at", "properties", ["created_at"])
    op.create_index("properties_fts_idx", "properties", ["fts"], postgresql_using="gin")
    op.execute("""
        CREATE FUNCTION properties_fts_update() RETURNS trigger AS $$
        BEGIN
            NEW.fts := to_tsvector('english',
                coalesce(NEW.title, '') || ' ' || coalesce(NEW.description, '') || ' ' || coalesce(NEW.location_area, ''));
            RETURN NEW;
        END
        $$ LANGUAGE plpgsql
    """)
    op.execute("""
        CREATE TRIGGER properties_fts_trigger
        BEFORE INSERT OR UPDATE OF title, description, location_area ON properties
        FOR EACH ROW EXECUTE FUNCTION properties_fts_update()
    """)

    op.create_table(
        "messages",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("sender_id", sa.String(32), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("receiver_id", sa.String(32), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("property_id", sa.String(32), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("content", sa.String(1000), nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.Column("type", message_type, nullable=False, server_default="inquiry"),
        sa.Column("viewing_request", JSONB),
        *_timestamps(),
    )
    op.create_index("ix_messages_sender_receiver_created", "messages", ["sender_id", "receiver_id", "created_at"])
    op.create_index("ix_messages_receiver_is_read", "messages", ["receiver_id", "is_read"])


def downgrade():
    op.drop_table("messages")
    op.execute("DROP TRIGGER IF EXISTS properties_fts_trigger ON properties")
    op.execute("DROP FUNCTION IF EXISTS properties_fts_update()")
    op.drop_table("properties")
    op.drop_table("users")
    for enum in (message_type, user_role, lease_term, property_type):
        enum.drop(op.get_bind(), checkfirst=True)
