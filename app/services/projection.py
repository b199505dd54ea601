from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.services.predicates import in_set, where
from app.stores.base import Store, get_path, has_path, set_path

DEFAULT_SORT = "-createdAt"

SORTABLE_FIELDS = (
    "createdAt", "updatedAt", "title", "price", "deposit", "size", "rating",
    "bedrooms", "bathrooms", "viewCount", "favoriteCount", "reviewCount",
    "propertyType", "leaseTerm", "availableFrom", "location.area", "location.city",
    "isAvailable", "isVerified", "isFeatured",
)

LANDLORD_SUMMARY_FIELDS = ("name", "email", "phone")


def parse_sort(expression: Optional[str], allowed: Sequence[str] = SORTABLE_FIELDS) -> List[Tuple[str, bool]]:
    """
    Parse ``"price,-createdAt"`` into ``[("price", False), ("createdAt", True)]``.

    Unknown fields are dropped; if nothing usable remains the default
    newest-first order applies.
    """
    order: List[Tuple[str, bool]] = []
    for part in (expression or "").split(","):
        part = part.strip()
        descending = part.startswith("-")
        field = part.lstrip("-+").strip()
        if field in allowed and field not in [f for f, _ in order]:
            order.append((field, descending))
    if not order:
        order.append((DEFAULT_SORT.lstrip("-"), True))
    return order


@dataclass(frozen=True)
class Selection:
    fields: Tuple[str, ...]
    exclude: bool = False

    def apply(self, doc: dict) -> dict:
        if self.exclude:
            shaped = dict(doc)
            for path in self.fields:
                _drop_path(shaped, path)
            return shaped
        shaped: Dict = {"id": doc.get("id")}
        for path in self.fields:
            if has_path(doc, path):
                set_path(shaped, path, get_path(doc, path))
        return shaped


def _drop_path(doc: dict, path: str) -> None:
    head, _, rest = path.partition(".")
    if head not in doc:
        return
    if not rest:
        del doc[head]
    elif isinstance(doc[head], dict):
        doc[head] = dict(doc[head])
        _drop_path(doc[head], rest)


def parse_select(expression: Optional[str]) -> Optional[Selection]:
    """``"title,price"`` keeps those fields (and ``id``); ``"-reports,-images"`` drops them."""
    fields = [part.strip() for part in (expression or "").split(",") if part.strip()]
    if not fields:
        return None
    if all(f.startswith("-") for f in fields):
        return Selection(tuple(f[1:] for f in fields if f[1:]), exclude=True)
    return Selection(tuple(f.lstrip("+") for f in fields if not f.startswith("-")))


def user_summary(user: Optional[dict]) -> Optional[dict]:
    if user is None:
        return None
    summary = {"id": user["id"]}
    for field in LANDLORD_SUMMARY_FIELDS:
        summary[field] = user.get(field)
    return summary


async def load_user_summaries(store: Store, user_ids: Iterable[Optional[str]]) -> Dict[str, dict]:
    ids = sorted({uid for uid in user_ids if uid})
    if not ids:
        return {}
    users = await store.users.find(where(in_set("id", ids)))
    return {user["id"]: user_summary(user) for user in users}


async def project_properties(store: Store, docs: List[dict], selection: Optional[Selection] = None) -> List[dict]:
    """Resolve each landlord reference to a contact summary, then apply the field selection."""
    landlords = await load_user_summaries(store, (doc.get("landlord") for doc in docs))
    projected = []
    for doc in docs:
        shaped = dict(doc)
        if "landlord" in shaped:
            shaped["landlord"] = landlords.get(shaped["landlord"])
        if selection is not None:
            shaped = selection.apply(shaped)
        projected.append(shaped)
    return projected


async def project_property(store: Store, doc: dict) -> dict:
    return (await project_properties(store, [doc]))[0]


def public_user(user: dict) -> dict:
    """A user document as it may be shown to its owner; the password hash never leaves the store."""
    return {key: value for key, value in user.items() if key != "password"}