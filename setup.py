from setuptools import find_namespace_packages, setup

setup(
    name="captionsync-backend",
    version="0.1.0",
    package_dir={"": "backend"},
    packages=find_namespace_packages(where="backend", include=["shared*", "services*"]),
    python_requires=">=3.11",
    install_requires=[
        "aiohttp>=3.9",
        "fastapi>=0.110",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "httpx>=0.26",
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    include_package_data=True,
    description="Caption synchronization and track generation backend",
)
