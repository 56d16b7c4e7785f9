"""Chord chart data example for execforge.

logs in, fetches one metric sliced by two attributes from the GoodSales demo
project and reshapes it into the square matrix a chord layout expects. the
drawing itself is left to whatever chart library you like - we just print
the matrix as json.

credentials come from EXECFORGE_USERNAME / EXECFORGE_PASSWORD (or EXECFORGE_DOMAIN
for another host).
"""

import asyncio
import json

from execforge import ClientConfig, ExecutionClient
from execforge.reshape import chord_matrix

PROJECT_ID = "GoodSalesDemo"

# report element identifiers - two attributes, then the metric
ELEMENTS = [
    "closed.aam81lMifn6q",
    "label.owner.id.name",
    "afSEwRwdbMeQ",
]


async def main() -> None:
    config = ClientConfig.from_env()

    async with ExecutionClient(config) as client:
        print("Logging in...")
        await client.login()

        print("Loading data...")
        result = await client.get_data(PROJECT_ID, ELEMENTS)

    matrix = chord_matrix(result)
    print(json.dumps(matrix, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
