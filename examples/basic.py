import logging

from pydantic import BaseModel

from nanoroute import Api
from nanoroute import HTTPException

logging.basicConfig(level=logging.INFO)

api = Api(origin="*", logger=logging.getLogger("nanoroute.example"))


class Item(BaseModel):
    id: int
    name: str
    price: float


items_db: dict[int, Item] = {
    1: Item(id=1, name="kettle", price=24.5),
}

USERS = {"alice": "secret"}


def check_login(username: str, password: str) -> bool:
    return USERS.get(username) == password


@api.get("/")
def index() -> dict[str, str]:
    return {"message": "Welcome to nanoroute!"}


@api.get("/items")
def list_items() -> list[Item]:
    return list(items_db.values())


@api.get("/items/{item_id}")
def get_item(item_id: str) -> Item:
    item = items_db.get(int(item_id)) if item_id.isdigit() else None
    if item is None:
        raise HTTPException(404, "Item not found")
    return item


@api.delete("/items/{item_id}")
def delete_item(item_id: str) -> None:
    if not item_id.isdigit():
        raise HTTPException(404, "Item not found")

    def remove() -> None:
        items_db.pop(int(item_id), None)
        api.override_response_code(204)

    api.guard(remove, check_login)


@api.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy"}


api.set_prefix("api")


if __name__ == "__main__":
    api.run(host="127.0.0.1", port=8000, workers=4)
