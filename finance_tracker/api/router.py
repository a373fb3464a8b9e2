from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Literal, Optional

from finance_tracker.api.deps import get_store, record_filter
from finance_tracker.core.security import CurrentUser, create_token, get_current_user, get_token_claims
from finance_tracker.schemas.advisory import SuggestRequest, SuggestResponse
from finance_tracker.schemas.analytics import CategoryTotal, Granularity, SeriesResponse, SummaryResponse, TrendPoint
from finance_tracker.schemas.auth import (
    GoogleLoginRequest, LoginRequest, MessageResponse, ProfileEnvelope, ProfileOut, ProfileUpdate,
    RefreshResponse, RegisterRequest, TokenResponse,
)
from finance_tracker.schemas.budget import (
    BudgetOverview, BudgetSet, BudgetState, BudgetUpdated, ExpenseCreate, ExpenseResponse, InsightResponse,
)
from finance_tracker.schemas.transaction import (
    ParseRequest, TransactionCreate, TransactionProposal, TransactionResponse, TransactionUpdate,
)
from finance_tracker.services.aggregator import RecordFilter
from finance_tracker.services.auth import AuthService
from finance_tracker.services.finance import FinanceService
from finance_tracker.storage.base import FinanceStore

api_router = APIRouter()
auth_router = APIRouter()


def _check_id(value: int):
    if value <= 0:
        raise HTTPException(status_code=400, detail="Invalid id")


# --- Auth ---

@api_router.post("/auth/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED,
                 tags=["Auth"])
async def register(req: RegisterRequest, store: FinanceStore = Depends(get_store)):
    await AuthService.register(store, req)
    return {"message": "User registered successfully"}


@api_router.post("/auth/login", response_model=TokenResponse, tags=["Auth"])
async def login(req: LoginRequest, store: FinanceStore = Depends(get_store)):
    return await AuthService.login(store, req.email, req.password)


@api_router.get("/auth/validate", tags=["Auth"])
async def validate(claims: dict = Depends(get_token_claims)):
    return {"user": claims}


@api_router.post("/auth/google-login", response_model=TokenResponse, tags=["Auth"])
@auth_router.post("/google", response_model=TokenResponse, tags=["Auth"])
async def google_login(req: GoogleLoginRequest, store: FinanceStore = Depends(get_store)):
    return await AuthService.google_login(store, req.token)


@auth_router.post("/refresh", response_model=RefreshResponse, tags=["Auth"])
async def refresh(user: CurrentUser = Depends(get_current_user)):
    return {"token": create_token(user.id, user.email)}


@auth_router.post("/logout", response_model=MessageResponse, tags=["Auth"])
async def logout(user: CurrentUser = Depends(get_current_user)):
    # Tokens are stateless; the client just drops it
    return {"message": "Logged out"}


@auth_router.get("/profile", response_model=ProfileOut, tags=["Auth"])
async def get_profile(user: CurrentUser = Depends(get_current_user), store: FinanceStore = Depends(get_store)):
    profile = await AuthService.get_profile(store, user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@api_router.put("/profile", response_model=ProfileEnvelope, tags=["Auth"])
async def update_profile(req: ProfileUpdate, user: CurrentUser = Depends(get_current_user),
                         store: FinanceStore = Depends(get_store)):
    result = await AuthService.update_profile(store, user.id, req)
    if not result:
        raise HTTPException(status_code=404, detail="User not found")
    return result


# --- Budget & expenses ---

@api_router.get("/budget", response_model=BudgetState, tags=["Budget"])
async def get_budget(user: CurrentUser = Depends(get_current_user), store: FinanceStore = Depends(get_store)):
    return await FinanceService.get_budget_state(store, user.id)


@api_router.post("/budget", response_model=BudgetUpdated, tags=["Budget"])
async def set_budget(req: BudgetSet, user: CurrentUser = Depends(get_current_user),
                     store: FinanceStore = Depends(get_store)):
    return await FinanceService.set_budget(store, user.id, req.total_budget)


@api_router.get("/budget/overview", response_model=BudgetOverview, tags=["Budget"])
async def get_budget_overview(flt: RecordFilter = Depends(record_filter),
                              user: CurrentUser = Depends(get_current_user),
                              store: FinanceStore = Depends(get_store)):
    return await FinanceService.get_budget_overview(store, user.id, flt)


@api_router.get("/budget/insight", response_model=InsightResponse, tags=["Budget"])
async def get_insight(user: CurrentUser = Depends(get_current_user), store: FinanceStore = Depends(get_store)):
    return await FinanceService.get_insight(store, user.id)


@api_router.get("/expenses", response_model=List[ExpenseResponse], tags=["Budget"])
async def list_expenses(flt: RecordFilter = Depends(record_filter),
                        user: CurrentUser = Depends(get_current_user),
                        store: FinanceStore = Depends(get_store)):
    return await FinanceService.list_expenses(store, user.id, flt)


@api_router.post("/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED,
                 tags=["Budget"])
async def add_expense(req: ExpenseCreate, user: CurrentUser = Depends(get_current_user),
                      store: FinanceStore = Depends(get_store)):
    return await FinanceService.add_expense(store, user.id, req)


@api_router.delete("/expenses/{expense_id}", response_model=MessageResponse, tags=["Budget"])
async def delete_expense(expense_id: int, user: CurrentUser = Depends(get_current_user),
                         store: FinanceStore = Depends(get_store)):
    _check_id(expense_id)
    await FinanceService.delete_expense(store, user.id, expense_id)
    return {"message": "Deleted"}


@api_router.post("/ai/suggest", response_model=SuggestResponse, tags=["Budget"])
async def ai_suggest(req: SuggestRequest):
    suggestion = await FinanceService.suggest(req.total_budget, req.expenses)
    return {"suggestion": suggestion}


# --- Transactions ---

@api_router.post("/transactions/parse", response_model=TransactionProposal, tags=["Transactions"])
async def parse_transaction(req: ParseRequest, user: CurrentUser = Depends(get_current_user)):
    proposal = FinanceService.parse_text(req.text)
    if not proposal:
        raise HTTPException(status_code=400, detail="Unable to parse input")
    return proposal


@api_router.post("/transactions", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED,
                 tags=["Transactions"])
async def create_transaction(req: TransactionCreate, user: CurrentUser = Depends(get_current_user),
                             store: FinanceStore = Depends(get_store)):
    return await FinanceService.create_transaction(store, user.id, req)


@api_router.get("/transactions", response_model=List[TransactionResponse], tags=["Transactions"])
async def list_transactions(flt: RecordFilter = Depends(record_filter),
                            user: CurrentUser = Depends(get_current_user),
                            store: FinanceStore = Depends(get_store)):
    return await FinanceService.list_transactions(store, user.id, flt)


@api_router.put("/transactions/{transaction_id}", response_model=TransactionResponse, tags=["Transactions"])
async def update_transaction(transaction_id: int, req: TransactionUpdate,
                             user: CurrentUser = Depends(get_current_user),
                             store: FinanceStore = Depends(get_store)):
    _check_id(transaction_id)
    return await FinanceService.update_transaction(store, user.id, transaction_id, req)


@api_router.delete("/transactions/{transaction_id}", response_model=MessageResponse, tags=["Transactions"])
async def delete_transaction(transaction_id: int, user: CurrentUser = Depends(get_current_user),
                             store: FinanceStore = Depends(get_store)):
    _check_id(transaction_id)
    await FinanceService.delete_transaction(store, user.id, transaction_id)
    return {"message": "Deleted"}


# --- Analytics ---

@api_router.get("/analytics/summary", response_model=SummaryResponse, tags=["Analytics"])
async def get_summary(flt: RecordFilter = Depends(record_filter),
                      user: CurrentUser = Depends(get_current_user),
                      store: FinanceStore = Depends(get_store)):
    return await FinanceService.get_summary(store, user.id, flt)


@api_router.get("/analytics/categories", response_model=List[CategoryTotal], tags=["Analytics"])
async def get_categories(flt: RecordFilter = Depends(record_filter),
                         user: CurrentUser = Depends(get_current_user),
                         store: FinanceStore = Depends(get_store)):
    return await FinanceService.get_category_totals(store, user.id, flt)


@api_router.get("/analytics/trends", response_model=List[TrendPoint], tags=["Analytics"])
async def get_trends(flt: RecordFilter = Depends(record_filter),
                     user: CurrentUser = Depends(get_current_user),
                     store: FinanceStore = Depends(get_store)):
    return await FinanceService.get_trends(store, user.id, flt)


@api_router.get("/analytics/series", response_model=SeriesResponse, tags=["Analytics"])
async def get_series(
        granularity: Granularity = Query("day"),
        top: Optional[int] = Query(None, ge=0, le=20),
        source: Literal["transactions", "expenses"] = Query("transactions"),
        flt: RecordFilter = Depends(record_filter),
        user: CurrentUser = Depends(get_current_user),
        store: FinanceStore = Depends(get_store)
):
    return await FinanceService.get_series(store, user.id, granularity, flt, top_n=top, source=source)
