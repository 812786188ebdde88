"""
Seed script: crea una constructora de demostración con datos realistas.

Qué crea:
- Empresa (tenant) + usuario ADMIN activo con credenciales.
- Mandantes (clientes) y proveedores con RUT válido.
- Centros de costo y obras con presupuesto y avance.
- Facturas de venta y compra repartidas en los últimos meses, con pagos parciales
  y totales, más algunas notas de crédito.

Ejecutar dentro del contenedor de la API:
    docker compose exec api python scripts/seed_demo_data.py \
        --company-name "Constructora Demo SpA" \
        --email admin@obrasdemo.cl \
        --password ObrasDemo!2025 \
        --invoices 120

Solo para ambientes de desarrollo.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import logging
import random
from datetime import date, timedelta

from app.database.database import SessionLocal
from app.common.validators import calculate_rut_dv, format_rut
from app.modules.auth.models import User, UserCompany, UserRole
from app.modules.auth.utils import hash_password
from app.modules.company.models import Company
from app.modules.clients.schemas import ClientCreate
from app.modules.clients.service import ClientService
from app.modules.cost_centers.schemas import CostCenterCreate
from app.modules.cost_centers.service import CostCenterService
from app.modules.projects.schemas import ProjectCreate
from app.modules.projects.service import ProjectService
from app.modules.invoices.schemas import InvoiceCreate, PaymentCreate, round_clp
from app.modules.invoices.service import InvoiceService

logger = logging.getLogger("obras360.seed")

CLIENT_NAMES = [
    "Inmobiliaria Los Robles", "Municipalidad de Ñuñoa", "Constructora Pacífico",
    "Serviu Metropolitano", "Inversiones Cordillera", "Hospital Regional Sur",
]
SUPPLIER_NAMES = [
    "Cementos del Maipo", "Ferretería El Roble", "Áridos San Bernardo",
    "Arriendo de Maquinaria Central", "Aceros Andinos", "Hormigones Premix",
]
COST_CENTERS = [("CC-OBR", "Obra gruesa"), ("CC-TER", "Terminaciones"), ("CC-INS", "Instalaciones")]
PROJECTS = [("Edificio Los Aromos", 850_000_000), ("Condominio Vista Sur", 420_000_000), ("Bodega Quilicura", 180_000_000)]


def make_rut(body: int) -> str:
    return format_rut(f"{body}-{calculate_rut_dv(str(body))}")


def create_company(db, name: str, rut: str) -> Company:
    existing = db.query(Company).filter(Company.name == name).first()
    if existing:
        return existing
    company = Company(name=name, rut=rut, address="Av. Providencia 1000, Santiago")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def create_admin(db, company: Company, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(
            email=email,
            name="Administrador Demo",
            password=hash_password(password),
            role=UserRole.ADMIN.value,
            allowed_sections=[],
        )
        db.add(user)
        db.flush()
    membership = db.query(UserCompany).filter(
        UserCompany.user_id == user.id, UserCompany.company_id == company.id
    ).first()
    if not membership:
        db.add(UserCompany(user_id=user.id, company_id=company.id))
    db.commit()
    db.refresh(user)
    return user


def create_parties(db, tenant_id):
    service = ClientService(db)
    customers, suppliers = [], []
    for idx, name in enumerate(CLIENT_NAMES):
        data = ClientCreate.model_validate({"rut": make_rut(76_100_000 + idx * 7), "name": name})
        customers.append(service.create_client(data, tenant_id))
    for idx, name in enumerate(SUPPLIER_NAMES):
        data = ClientCreate.model_validate({"rut": make_rut(77_200_000 + idx * 11), "name": name})
        suppliers.append(service.create_client(data, tenant_id))
    return customers, suppliers


def create_projects(db, tenant_id, customers):
    centers = [
        CostCenterService(db).create_cost_center(CostCenterCreate(code=code, name=name), tenant_id)
        for code, name in COST_CENTERS
    ]
    service = ProjectService(db)
    projects = []
    for idx, (name, budget) in enumerate(PROJECTS):
        data = ProjectCreate(
            name=name,
            budget=budget,
            client_id=customers[idx].id,
            progress=random.randint(5, 80),
            start_date=date.today() - timedelta(days=365),
            cost_center_ids=[center.id for center in centers],
        )
        projects.append(service.create_project(data, tenant_id))
    return projects, centers


def create_invoices(db, tenant_id, user_id, customers, suppliers, projects, centers, count: int) -> int:
    service = InvoiceService(db)
    created = 0
    for idx in range(1, count + 1):
        is_sale = random.random() < 0.6
        issued = date.today() - timedelta(days=random.randint(0, 330))
        net = random.randrange(500_000, 25_000_000, 10_000)
        party = random.choice(customers if is_sale else suppliers)
        invoice = service.create_invoice(InvoiceCreate.model_validate({
            "number": str(1000 + idx),
            "type": "VENTA" if is_sale else "COMPRA",
            "date": issued,
            "dueDate": issued + timedelta(days=30),
            "netAmount": net,
            "clientId": party.id,
            "projectId": random.choice(projects).id,
            "costCenterId": random.choice(centers).id,
        }), tenant_id)
        created += 1

        roll = random.random()
        if roll < 0.45:
            service.add_payment(invoice.id, PaymentCreate(amount=invoice.total_amount, date=issued + timedelta(days=25)), tenant_id, user_id)
        elif roll < 0.7:
            partial = round_clp(invoice.total_amount / 2)
            service.add_payment(invoice.id, PaymentCreate(amount=partial, date=issued + timedelta(days=15)), tenant_id, user_id)
        elif is_sale and roll < 0.75:
            service.create_invoice(InvoiceCreate.model_validate({
                "number": f"NC-{idx}",
                "type": "NOTA_CREDITO",
                "date": issued + timedelta(days=5),
                "totalAmount": invoice.total_amount,
                "clientId": party.id,
                "relatedInvoiceId": invoice.id,
            }), tenant_id)
            created += 1

        if created % 50 == 0:
            logger.info("  Documentos creados: %s", created)
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed de datos demo para Obras360")
    parser.add_argument("--company-name", default="Constructora Demo SpA")
    parser.add_argument("--company-rut", default="76.086.428-5")
    parser.add_argument("--email", default="admin@obrasdemo.cl")
    parser.add_argument("--password", default="ObrasDemo!2025")
    parser.add_argument("--invoices", type=int, default=120)
    parser.add_argument("--seed", type=int, default=360)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    random.seed(args.seed)

    db = SessionLocal()
    try:
        company = create_company(db, args.company_name, args.company_rut)
        user = create_admin(db, company, args.email, args.password)

        logger.info("Creando mandantes y proveedores...")
        customers, suppliers = create_parties(db, company.id)

        logger.info("Creando centros de costo y obras...")
        projects, centers = create_projects(db, company.id, customers)

        logger.info("Creando facturas y pagos...")
        total = create_invoices(db, company.id, user.id, customers, suppliers, projects, centers, args.invoices)
        logger.info("Documentos creados: %s", total)

        logger.info("\nSeed completado.")
        logger.info("  Email:        %s", args.email)
        logger.info("  Password:     %s", args.password)
        logger.info("  X-Company-ID: %s", company.id)
    finally:
        db.close()


if __name__ == "__main__":
    main()
