"""Supabase client and CRUD helpers for all tables."""

from datetime import UTC, datetime

from supabase import Client, create_client

from .config import SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL

_client: Client | None = None


def get_client() -> Client:
    global _client
    if _client is None:
        _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
    return _client


# ---------------------------------------------------------------------------
# auth
# ---------------------------------------------------------------------------

def get_user_id(token: str) -> str | None:
    """Resolve a Supabase access token to its user id."""
    resp = get_client().auth.get_user(token)
    user = getattr(resp, "user", None)
    return user.id if user else None


def is_admin(user_id: str) -> bool:
    rows = (
        get_client()
        .table("user_roles")
        .select("role")
        .eq("user_id", user_id)
        .eq("role", "admin")
        .execute()
        .data
    )
    return bool(rows)


# ---------------------------------------------------------------------------
# cart
# ---------------------------------------------------------------------------

def list_cart(user_id: str) -> list[dict]:
    """Cart rows for a user, each joined with its product's price and designer."""
    return (
        get_client()
        .table("cart")
        .select("*, designer_products:product_id (id, name, designer_id, designer_price, base_price)")
        .eq("user_id", user_id)
        .execute()
        .data
    )


def clear_cart(user_id: str) -> None:
    get_client().table("cart").delete().eq("user_id", user_id).execute()


# ---------------------------------------------------------------------------
# orders
# ---------------------------------------------------------------------------

def create_order(row: dict) -> dict:
    return get_client().table("orders").insert(row).execute().data[0]


def get_order(order_id: str) -> dict | None:
    rows = get_client().table("orders").select("*, order_items(*)").eq("id", order_id).execute().data
    return rows[0] if rows else None


def create_order_items(rows: list[dict]) -> list[dict]:
    return get_client().table("order_items").insert(rows).execute().data


# ---------------------------------------------------------------------------
# designer_earnings
# ---------------------------------------------------------------------------

def create_earnings(rows: list[dict]) -> list[dict]:
    return get_client().table("designer_earnings").insert(rows).execute().data


# ---------------------------------------------------------------------------
# designer_products
# ---------------------------------------------------------------------------

def get_product(product_id: str) -> dict | None:
    rows = get_client().table("designer_products").select("*").eq("id", product_id).execute().data
    return rows[0] if rows else None


def list_product_names(product_ids: list[str]) -> dict[str, str]:
    if not product_ids:
        return {}
    rows = get_client().table("designer_products").select("id, name").in_("id", product_ids).execute().data
    return {row["id"]: row["name"] for row in rows}


def update_product(product_id: str, updates: dict) -> dict:
    updates["updated_at"] = datetime.now(UTC).isoformat()
    return get_client().table("designer_products").update(updates).eq("id", product_id).execute().data[0]


def increment_product_sales(product_id: str, quantity: int) -> bool:
    """Add ``quantity`` to a product's total_sales (read, then write).

    Returns False when the product no longer exists.
    """
    product = get_product(product_id)
    if not product:
        return False
    total = (product.get("total_sales") or 0) + quantity
    get_client().table("designer_products").update({"total_sales": total}).eq("id", product_id).execute()
    return True


# ---------------------------------------------------------------------------
# designer_profiles
# ---------------------------------------------------------------------------

def get_designer(designer_id: str) -> dict | None:
    rows = get_client().table("designer_profiles").select("name, email").eq("id", designer_id).execute().data
    return rows[0] if rows else None


# ---------------------------------------------------------------------------
# currency_rates
# ---------------------------------------------------------------------------

def get_currency_rate(base_currency: str, target_currency: str) -> dict | None:
    rows = (
        get_client()
        .table("currency_rates")
        .select("*")
        .eq("base_currency", base_currency)
        .eq("target_currency", target_currency)
        .execute()
        .data
    )
    return rows[0] if rows else None


def upsert_currency_rate(base_currency: str, target_currency: str, rate: float) -> dict:
    row = {
        "base_currency": base_currency,
        "target_currency": target_currency,
        "rate": rate,
        "last_updated": datetime.now(UTC).isoformat(),
    }
    return (
        get_client()
        .table("currency_rates")
        .upsert(row, on_conflict="base_currency,target_currency")
        .execute()
        .data[0]
    )

