# This is a simple program to show how to use PyCidata to extract data from a
# seed ISO.

# Import standard python modules.
import sys
from io import BytesIO

# Import pycidata itself.
import pycidata

# Check that there are enough command-line arguments.
if len(sys.argv) != 1:
    print('Usage: %s' % (sys.argv[0]))
    sys.exit(1)

# First we'll build a seed ISO in memory (see create-seed.py for more
# information about this step).
data = pycidata.make_cloud_init_iso('#cloud-config\nhostname: myvm\n',
                                    'instance-id: myvm\n')

# Now, let's open up the ISO and look at what is in the root directory.
iso = pycidata.PyCidata()
iso.open_fp(BytesIO(data))
for child in iso.list_children():
    print(child.file_identifier().decode('ascii'))

# Use the get_file_from_iso_fp() API to extract the user-data into the file
# object.  Only the recorded length is extracted, not the padding that fills
# out the last extent.
extracted = BytesIO()
iso.get_file_from_iso_fp(extracted, iso_path='/user-data')
iso.close()

print(extracted.getvalue().decode('utf-8'))
