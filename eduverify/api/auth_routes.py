from fastapi import APIRouter, Depends

from eduverify.api.auth import get_token, require_token
from eduverify.api.schemas import CompanySettingsRequest, LoginRequest, LoginResponse, SignupRequest
from eduverify.container import Services, get_services
from eduverify.services.errors import ValidationError
from eduverify.services.file_service import FileInfo
from eduverify.store.models import CompanyPatch, CompanySignup, to_dict

router = APIRouter(tags=["auth"])


@router.post("/auth/login", response_model=LoginResponse)
def login(body: LoginRequest, services: Services = Depends(get_services)):
    return services.auth.login(body.email, body.password)


@router.post("/auth/signup", status_code=201)
def signup(body: SignupRequest, services: Services = Depends(get_services)):
    company = services.auth.signup(CompanySignup(
        companyName=body.companyName,
        email=body.email,
        password=body.password,
        contactNumber=body.contactNumber,
        address=body.address,
        website=body.website,
        companyCertificateName=body.companyCertificate.name if body.companyCertificate else None,
    ))
    return to_dict(company)


@router.get("/auth/me")
def me(token: str = Depends(require_token), services: Services = Depends(get_services)):
    return to_dict(services.auth.me(token))


@router.post("/auth/logout")
def logout(token: str = Depends(get_token), services: Services = Depends(get_services)):
    # Logging out without a session is not an error
    if token:
        services.auth.logout(token)
    return {"status": "ok"}


@router.patch("/company")
def update_company(
    body: CompanySettingsRequest,
    token: str = Depends(require_token),
    services: Services = Depends(get_services),
):
    patch = CompanyPatch(**body.model_dump(exclude={"logo"}))
    if body.logo is not None:
        logo = FileInfo(name=body.logo.name, size=body.logo.size, type=body.logo.type)
        error = services.files.validate_logo(logo)
        if error:
            raise ValidationError(error)
        patch.brandLogo = services.files.upload(logo)["url"]
    return to_dict(services.auth.update_company(token, patch))
