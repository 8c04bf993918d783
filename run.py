#!/usr/bin/env python3
"""
Run script for the TalentMatch AI API.
"""

import asyncio
import uvicorn
from talentmatch.config.settings import settings
from talentmatch.services.database_service import database_service
from talentmatch.services.setup_check_service import SetupCheckService


async def show_setup_status():
    """Print the database and storage setup check before the server starts."""
    try:
        results = await asyncio.wait_for(
            SetupCheckService(database_service).run_setup_checks(),
            timeout=30.0
        )
        print("=" * 60)
        for result in results:
            print(f"[{result.status.upper()}] {result.step}: {result.message}")
            if result.sql_to_run:
                print(result.sql_to_run)
        print("=" * 60)

    except asyncio.TimeoutError:
        print("Setup check timed out - database may be slow to respond")

    except Exception as e:
        print(f"Could not run setup check: {str(e)}")

    finally:
        await database_service.close()

    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"Server will be available at: http://localhost:{settings.PORT}")
    print(f"API Documentation: http://localhost:{settings.PORT}/docs")


if __name__ == "__main__":
    asyncio.run(show_setup_status())

    uvicorn.run(
        "talentmatch.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
