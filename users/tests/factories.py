from users.models import User, CompanyProfile, ResearcherProfile


def make_company(username="acme", company_name="Acme Labs"):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass1234",
        role=User.ROLE_COMPANY,
    )
    profile = CompanyProfile.objects.create(user=user, company_name=company_name, industry="Biotech")
    return user, profile


def make_researcher(username="ada", first_name="Ada", last_name="Lovelace"):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass1234",
        role=User.ROLE_RESEARCHER,
    )
    profile = ResearcherProfile.objects.create(
        user=user,
        first_name=first_name,
        last_name=last_name,
        specialization=["Machine learning"],
    )
    return user, profile
