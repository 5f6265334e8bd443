"""
Script para cargar cuentas (y vinculos PT -> cliente) desde JSON.

Uso:
    python -m scripts.seed_users              # Ejecutar carga
    python -m scripts.seed_users --dry-run    # Ver que haria sin ejecutar
    python -m scripts.seed_users --force      # Actualizar cuentas existentes
    python -m scripts.seed_users --file path  # Usar archivo JSON personalizado

Cada entrada acepta: email, name, phone, role, status, password y
trainer_email (vincula la cuenta como cliente de ese PT). Los roles y
estados admiten sinonimos y valores heredados.

El script es idempotente: las cuentas se identifican por email.
"""
import asyncio
import argparse
import json
import sys
from pathlib import Path

from loguru import logger


# Configurar path para imports
API_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(API_DIR))


async def load_users_data(file_path: Path) -> list:
    """Carga la lista de cuentas desde el archivo JSON."""
    if not file_path.exists():
        logger.error(f"Archivo no encontrado: {file_path}")
        sys.exit(1)

    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    logger.info(f"Cargadas {len(data)} cuentas desde {file_path}")
    return data


async def seed_users(
    users_data: list,
    dry_run: bool = False,
    force_update: bool = False
) -> dict:
    """
    Inserta o actualiza cuentas y crea los vinculos con su PT.

    Args:
        users_data: Lista de diccionarios con datos de cuentas
        dry_run: Si True, solo muestra que haria sin ejecutar
        force_update: Si True, actualiza cuentas existentes

    Returns:
        Diccionario con estadisticas de la operacion
    """
    from fitdash.core.security import security_service
    from fitdash.infrastructure.database.session import AsyncSessionLocal, init_db
    from fitdash.infrastructure.repositories.user_repository import TrainerClientRepository, UserRepository
    from fitdash.shared.constants.roles import to_db_role
    from fitdash.shared.constants.status_constants import UserStatus, to_status

    stats = {
        "total": len(users_data),
        "inserted": 0,
        "updated": 0,
        "skipped": 0,
        "linked": 0,
        "errors": 0
    }

    if dry_run:
        logger.info("[DRY-RUN] Simulando carga...")
    else:
        logger.info("Inicializando base de datos...")
        await init_db()

    async with AsyncSessionLocal() as session:
        users = UserRepository(session)
        links = TrainerClientRepository(session)
        pending_links = []

        for entry in users_data:
            email = (entry.get("email") or "").strip().lower()
            role = to_db_role(entry.get("role") or "client")
            if not email or role is None:
                logger.warning(f"Entrada ignorada (email o rol invalido): {entry.get('email')!r}")
                stats["errors"] += 1
                continue

            fields = {
                "name": entry.get("name"),
                "phone": entry.get("phone"),
                "role": role,
                "status": to_status(entry.get("status"), fallback=UserStatus.ACTIVE).value,
                "password_hash": security_service.hash_password(entry["password"]) if entry.get("password") else None,
            }

            existing = await users.get_by_email(email)
            if existing:
                if not force_update:
                    logger.debug(f"Saltando (ya existe): {email}")
                    stats["skipped"] += 1
                elif dry_run:
                    logger.info(f"[DRY-RUN] Actualizaria: {email}")
                    stats["updated"] += 1
                else:
                    await users.update_fields(existing, **fields)
                    logger.debug(f"Actualizado: {email}")
                    stats["updated"] += 1
            elif dry_run:
                logger.info(f"[DRY-RUN] Insertaria: {email} ({role})")
                stats["inserted"] += 1
            else:
                await users.create(email=email, **fields)
                logger.debug(f"Insertado: {email}")
                stats["inserted"] += 1

            trainer_email = (entry.get("trainer_email") or "").strip().lower()
            if trainer_email:
                pending_links.append((trainer_email, email))

        # Los vinculos se crean al final: el PT puede aparecer despues del cliente
        for trainer_email, client_email in pending_links:
            if dry_run:
                logger.info(f"[DRY-RUN] Vincularia {client_email} con {trainer_email}")
                stats["linked"] += 1
                continue
            trainer = await users.get_by_email(trainer_email)
            client = await users.get_by_email(client_email)
            if not trainer or not client:
                logger.warning(f"Vinculo ignorado: {trainer_email} -> {client_email}")
                stats["errors"] += 1
                continue
            if not await links.is_linked(trainer.id, client.id):
                await links.link(trainer.id, client.id)
                stats["linked"] += 1

        if not dry_run:
            await session.commit()
            logger.success("Cambios guardados en la base de datos")

    return stats


def print_stats(stats: dict, dry_run: bool = False):
    """Imprime estadisticas de la operacion."""
    prefix = "[DRY-RUN] " if dry_run else ""

    print("\n" + "=" * 50)
    print(f"{prefix}RESUMEN DE CARGA")
    print("=" * 50)
    print(f"Total cuentas procesadas: {stats['total']}")
    print(f"Insertadas:               {stats['inserted']}")
    print(f"Actualizadas:             {stats['updated']}")
    print(f"Saltadas (ya existian):   {stats['skipped']}")
    print(f"Vinculos PT -> cliente:   {stats['linked']}")
    print(f"Errores:                  {stats['errors']}")
    print("=" * 50 + "\n")


async def main():
    """Funcion principal del script."""
    parser = argparse.ArgumentParser(
        description="Cargar cuentas desde JSON"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simular carga sin hacer cambios"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Actualizar cuentas que ya existen"
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="Ruta al archivo JSON (default: data/users_seed.json)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Mostrar mensajes de debug"
    )

    args = parser.parse_args()

    log_level = "DEBUG" if args.verbose else "INFO"
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
    )

    json_file = Path(args.file) if args.file else API_DIR / "data" / "users_seed.json"

    logger.info(f"Archivo de origen: {json_file}")
    logger.info(f"Modo: {'DRY-RUN' if args.dry_run else 'EJECUTAR'}")
    logger.info(f"Forzar actualizacion: {'SI' if args.force else 'NO'}")

    users_data = await load_users_data(json_file)

    stats = await seed_users(
        users_data,
        dry_run=args.dry_run,
        force_update=args.force
    )

    print_stats(stats, args.dry_run)

    if stats["errors"] > 0:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
