from setuptools import setup, find_packages

setup(
    name="interviewiq-backend",
    version="1.0.0",
    packages=find_packages(exclude=["interviewiq.tests", "interviewiq.tests.*"]),
    package_data={"interviewiq.domain.questions": ["data/*.yaml"]},
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.15.0",
        "pydantic>=1.10.0,<3.0.0",
        "sqlalchemy>=1.4.0",
        "python-dotenv>=0.19.0",
        "pyyaml>=6.0",
        "aiohttp>=3.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
        ],
    },
    python_requires=">=3.10",
)
