import io
import setuptools

VERSION='1.0.0'

setuptools.setup(name='pycidata',
                 version=VERSION,
                 description='Pure python cloud-init NoCloud seed ISO generator',
                 long_description=io.open('README.md', encoding='UTF-8').read(),
                 long_description_content_type='text/markdown',
                 author='Chris Lalancette',
                 author_email='clalancette@gmail.com',
                 license='LGPLv2',
                 classifiers=['Development Status :: 5 - Production/Stable',
                              'Intended Audience :: Developers',
                              'License :: OSI Approved :: GNU Lesser General Public License v2 (LGPLv2)',
                              'Natural Language :: English',
                              'Programming Language :: Python :: 3',
                 ],
                 keywords='iso9660 iso ecma119 cloud-init nocloud cidata seed',
                 packages=['pycidata'],
                 python_requires='>=3.6',
                 extras_require={'test': ['pytest']},
                 scripts=['tools/pycidata-genseed.py'],
)
