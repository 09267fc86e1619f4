# This is a simple program to show how to use PyCidata to create a new
# cloud-init NoCloud seed ISO.

# Import standard python modules.
import sys
from io import BytesIO

# Import pycidata itself.
import pycidata

# Check that there are enough command-line arguments.
if len(sys.argv) != 1:
    print('Usage: %s' % (sys.argv[0]))
    sys.exit(1)

# Create a new PyCidata object.
iso = pycidata.PyCidata()

# Create a new ISO, accepting all of the defaults.  The volume identifier is
# CIDATA, which is the label the NoCloud datasource looks for, and every
# directory record carries the same fixed date so the output is reproducible.
iso.new()

# Add the user-data and the meta-data.  Names are uppercased on the ISO and no
# ';1' version is appended; cloud-init finds them anyway, since the Linux isofs
# driver lowercases them on read.
userdata = b'#cloud-config\nhostname: myvm\n'
iso.add_fp(BytesIO(userdata), len(userdata), '/user-data')
iso.add_data(b'instance-id: myvm\n', '/meta-data')

# Write out the ISO to the file called 'seed.iso'.
iso.write('seed.iso')

# Close the ISO object.  After this call, the PyCidata object has forgotten
# everything about the previous ISO, and can be re-used.
iso.close()

# For the common case, make_cloud_init_iso() does all of the above in one call
# and returns the bytes of the ISO.
data = pycidata.make_cloud_init_iso('#cloud-config\nhostname: myvm\n',
                                    'instance-id: myvm\n')
print('Seed ISO is %d bytes' % (len(data)))
