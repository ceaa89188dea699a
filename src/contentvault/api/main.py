from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from contentvault.schema import (
    CaptureRequest,
    CaptureResponse,
    Item,
    PreferencesModel,
    PreferencesUpdate,
    QueryUpdate,
)
from contentvault.services import ContentVault, open_vault


def create_app(vault: Optional[ContentVault] = None) -> FastAPI:
    app = FastAPI(title="contentvault")
    app.state.vault = vault or open_vault()

    def get_vault() -> ContentVault:
        return app.state.vault

    @app.get("/")
    async def root():
        return "running"

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        vault = get_vault()
        return {"status": "healthy", "items": len(vault.all_items), "query": vault.query}

    @app.get("/items", response_model=List[Item])
    async def list_items(all: bool = False):
        vault = get_vault()
        items = vault.all_items if all else vault.items
        return [Item.from_item(item) for item in items]

    @app.get("/items/{item_id}", response_model=Item)
    async def get_item(item_id: str):
        item = get_vault().get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"No item {item_id}")
        return Item.from_item(item)

    @app.delete("/items/{item_id}")
    async def remove_item(item_id: str):
        if not get_vault().remove(item_id):
            raise HTTPException(status_code=404, detail=f"No item {item_id}")
        return {"ok": True}

    @app.post("/capture", response_model=CaptureResponse)
    async def capture(request: Request):
        try:
            payload = await request.json()
            model = CaptureRequest.model_validate(payload)
        except ValidationError as e:
            return JSONResponse(status_code=422, content={"error": str(e)})
        except ValueError as e:
            return JSONResponse(status_code=400, content={"error": f"Invalid JSON: {e}"})

        result = await get_vault().add_from_capture(model.to_event())
        return CaptureResponse.from_result(result)

    @app.post("/clear")
    async def clear_all(confirm: bool = False):
        if not confirm:
            raise HTTPException(status_code=409, detail="Pass confirm=true to clear all items")
        get_vault().clear_all()
        return {"ok": True}

    @app.get("/query")
    async def get_query():
        return {"query": get_vault().query}

    @app.put("/query")
    async def set_query(update: QueryUpdate):
        get_vault().set_query(update.query)
        return {"query": update.query}

    @app.get("/preferences", response_model=PreferencesModel)
    async def get_preferences():
        return PreferencesModel.from_preferences(get_vault().preferences)

    @app.put("/preferences", response_model=PreferencesModel)
    async def update_preferences(update: PreferencesUpdate):
        changes: Dict[str, Any] = {}
        if update.darkMode is not None:
            changes["dark_mode"] = update.darkMode
        if update.layout is not None:
            changes["layout"] = update.layout
        return PreferencesModel.from_preferences(get_vault().update_preferences(**changes))

    return app
