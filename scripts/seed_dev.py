"""
Carga cotizaciones de ejemplo en la base local.

    python scripts/seed_dev.py
"""
from datetime import timedelta

from hexagono.db import Base, SessionLocal, engine
from hexagono.domain.quotes import QuoteStatus, ServiceType
from hexagono.models.quote import utcnow
from hexagono.schemas.quote import QuoteCreateRequest
from hexagono.services.email import ResendMailer
from hexagono.services.lifecycle import QuoteLifecycleManager
from hexagono.services.notifications import NotificationService

SAMPLES = [
    ("María González", "maria@example.com", ServiceType.LANDING_PAGE, ["seo-optimization", "contact-forms"]),
    ("Juan Pérez", "juan@example.com", ServiceType.CORPORATE_WEB, ["cms-integration", "blog-functionality"]),
    ("Lucía Fernández", "lucia@example.com", ServiceType.ECOMMERCE, ["payment-gateway", "inventory-management"]),
    ("Carlos Díaz", "carlos@example.com", ServiceType.SOCIAL_MEDIA, ["content-calendar"]),
    ("Ana Romero", "ana@example.com", ServiceType.CORPORATE_WEB, ["multilingual"]),
]


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    # sin RESEND_API_KEY el mailer solo loguea
    notifications = NotificationService(SessionLocal, ResendMailer(api_key=""))
    lifecycle = QuoteLifecycleManager(db, notifications=notifications)

    created = []
    try:
        for name, email, service, features in SAMPLES:
            payload = QuoteCreateRequest(
                client_name=name,
                client_email=email,
                service_type=service,
                features=features,
                description="Cotización de prueba generada por seed_dev",
            )
            created.append(lifecycle.create_quote(payload))

        # una vieja para probar recordatorios y un par de estados distintos
        old = created[0]
        old.created_at = utcnow() - timedelta(hours=72)
        db.commit()
        lifecycle.update_status(created[1].id, QuoteStatus.IN_REVIEW, changed_by="seed")
        lifecycle.update_status(created[2].id, QuoteStatus.QUOTED, changed_by="seed", notes="Propuesta enviada")
        lifecycle.add_note(created[2].id, "seed", "El cliente prefiere pagos en cuotas", is_internal=False)

        for q in created:
            print(f"{q.quote_number}  {q.service_type.value:<14} token={q.access_token}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
