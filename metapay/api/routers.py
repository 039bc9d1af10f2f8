from fastapi import APIRouter, Depends
from metapay.api import version_prefix
from metapay.admin.dependencies import require_admin
from metapay.admin.routes import admin_auth_router
from metapay.common.routes import home_router
from metapay.fees.routes import fees_admin_router
from metapay.payouts.routes import payouts_admin_router, payouts_router
from metapay.sellers.routes import sellers_admin_router, sellers_router
from metapay.transactions.routes import payments_router, transactions_admin_router
from metapay.webhooks.routes import webhooks_router


public_routers = APIRouter(prefix=version_prefix)

public_routers.include_router(sellers_router, tags=["sellers"])
public_routers.include_router(payments_router, tags=["payments"])
public_routers.include_router(payouts_router, tags=["payouts"])
public_routers.include_router(webhooks_router, tags=["webhooks"])
public_routers.include_router(home_router, tags=["home"])

#--------------------------------------------------------------------------------------------------------

admin_routers = APIRouter(prefix=f"{version_prefix}/admin")

# token issuing, the only admin route without a bearer token
admin_routers.include_router(admin_auth_router, tags=["admin-auth"])

admin_guard = [Depends(require_admin)]
admin_routers.include_router(sellers_admin_router, tags=["sellers-admin"], dependencies=admin_guard)
admin_routers.include_router(transactions_admin_router, tags=["transactions-admin"], dependencies=admin_guard)
admin_routers.include_router(payouts_admin_router, tags=["payouts-admin"], dependencies=admin_guard)
admin_routers.include_router(fees_admin_router, tags=["fees-admin"], dependencies=admin_guard)
