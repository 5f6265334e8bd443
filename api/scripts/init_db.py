"""
Script para inicializar la base de datos (crea las tablas que falten).
"""
import asyncio
from loguru import logger

from fitdash.infrastructure.database.session import close_db, init_db


async def main():
    """Función principal para inicializar la base de datos."""
    logger.info("Inicializando base de datos...")
    
    try:
        await init_db()
        logger.success("Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
