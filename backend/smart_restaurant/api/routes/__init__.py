"""API routes."""

from fastapi import APIRouter

from smart_restaurant.api.routes import auth, guest_menu, menu_admin, tables

api_router = APIRouter()

# Guest routes are gated by the table QR token, not by admin auth
api_router.include_router(guest_menu.router, tags=["guest-menu"])

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(menu_admin.router, prefix="/admin/menu", tags=["menu-admin"])
api_router.include_router(tables.router, prefix="/admin/tables", tags=["tables"])
