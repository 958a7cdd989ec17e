import setuptools

setuptools.setup(
    name="tea_leaf_reader",
    version="0.2",
    author="yochi",
    author_email="pedrogush@gmail.com",
    description="Tea Leaf Fortune Reader: monthly fortune card ledger and reading analytics",
    packages=["controllers", "repositories", "services", "utils"],
    py_modules=["main"],
    classifiers=["Programming Language :: Python :: 3", "Operating System :: OS Independent"],
    python_requires=">=3.11",
    install_requires=[
        "loguru",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
