from setuptools import setup, find_packages


def read_requirements(path):
    with open(path) as f:
        return [line.strip() for line in f if line.strip() and not line.startswith("#")]


setup(
    name='weak-collections',
    version='0.1.0',
    author='Weak Collections Developers',
    description='Sets and maps that only weakly reference their members, compared by object identity.',
    keywords='weakref weak-set weak-map identity collections',
    python_requires='>=3.7',
    install_requires=read_requirements('requirements.txt'),
    extras_require={'test': read_requirements('requirements_test.txt')},
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
)
