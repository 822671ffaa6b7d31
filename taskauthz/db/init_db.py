from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskauthz.db.base import Base
from taskauthz.db.session import SessionLocal, engine
from taskauthz.models.security import Department, Organization, User
from taskauthz.models.tasks import Attachment, Task


def init_db() -> None:
    """
    Create tables + seed demo data.

    This is deliberately small and deterministic so you can quickly try the
    authorization behavior without additional setup.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed_demo_data(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Organization.id).limit(1)).first() is not None


def seed_demo_data(db: Session) -> None:
    # Organizations: one platform org plus two tenants
    platform = Organization(name="Platform HQ", description="Service operator", is_platform=True)
    acme = Organization(name="Acme Corp", description="Tenant")
    globex = Organization(name="Globex", description="Tenant")
    db.add_all([platform, acme, globex])
    db.flush()

    # Departments
    ops = Department(name="Operations", organization_id=platform.id)
    eng = Department(name="Engineering", organization_id=acme.id)
    fin = Department(name="Finance", organization_id=acme.id)
    gx_sales = Department(name="Sales", organization_id=globex.id)
    db.add_all([ops, eng, fin, gx_sales])
    db.flush()

    # Users
    root = User(
        username="root_super",
        email="root@platform.example.com",
        role="SuperAdmin",
        organization_id=platform.id,
        department_id=ops.id,
        is_platform_org_user=True,
    )
    ada = User(
        username="ada_admin",
        email="ada@acme.example.com",
        role="Admin",
        organization_id=acme.id,
        department_id=eng.id,
        is_hod=True,
    )
    mike = User(
        username="mike_mgr",
        email="mike@acme.example.com",
        role="Manager",
        organization_id=acme.id,
        department_id=eng.id,
    )
    uma = User(
        username="uma_user",
        email="uma@acme.example.com",
        role="User",
        organization_id=acme.id,
        department_id=eng.id,
    )
    fred = User(
        username="fred_fin",
        email="fred@acme.example.com",
        role="User",
        organization_id=acme.id,
        department_id=fin.id,
    )
    gina = User(
        username="gina_globex",
        email="gina@globex.example.com",
        role="SuperAdmin",
        organization_id=globex.id,
        department_id=gx_sales.id,
    )
    retired = User(
        username="ivan_inactive",
        email="ivan@acme.example.com",
        role="User",
        organization_id=acme.id,
        department_id=eng.id,
        is_active=False,
    )
    db.add_all([root, ada, mike, uma, fred, gina, retired])
    db.flush()

    eng.manager_id = ada.id

    # Tasks (one per subtype)
    t1 = Task(
        title="Ship login page",
        type="AssignedTask",
        organization_id=acme.id,
        department_id=eng.id,
        created_by=mike.id,
        assignees=[uma.id],
        watchers=[ada.id],
    )
    t2 = Task(
        title="Daily standup notes",
        type="RoutineTask",
        organization_id=acme.id,
        department_id=eng.id,
        created_by=uma.id,
        assignees=[],
        watchers=[],
    )
    t3 = Task(
        title="Quarterly budget",
        type="ProjectTask",
        organization_id=acme.id,
        department_id=fin.id,
        created_by=fred.id,
        assignees=[fred.id],
        watchers=[],
    )
    db.add_all([t1, t2, t3])
    db.flush()

    a1 = Attachment(
        file_name="mockup.png",
        file_url="https://files.example.com/mockup.png",
        parent_model="Task",
        parent_id=t1.id,
        organization_id=acme.id,
        department_id=eng.id,
        uploaded_by=uma.id,
    )
    db.add(a1)

    db.commit()
