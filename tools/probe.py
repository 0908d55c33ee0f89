import asyncio
import sys

import httpx

SAMPLES = [
    "Región Metropolitana de Santiago",
    "santiago",
    "region metropolotana de santiago",
    "RM",
    "Valparaíso",
    "",
]

async def probe(base_url: str = "http://127.0.0.1:3000"):
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
        health = await client.get("/health")
        print(f"health {health.status_code} {health.json()}")
        for region in SAMPLES:
            r = await client.post("/nearest", json={"region": region})
            body = r.json()
            if r.status_code == 200:
                names = ", ".join(c["name"] for c in body["centers"])
                print(f"{region!r:40} {r.status_code} {names}")
            else:
                print(f"{region!r:40} {r.status_code} {body.get('error')}")

if __name__ == "__main__":
    asyncio.run(probe(*sys.argv[1:2]))
