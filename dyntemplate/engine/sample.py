"""Starter configuration written when the user has none yet."""

SAMPLE_CONFIG = '''\
#
# This is a sample template configuration to use as a starter.
# It defines 2 templates that can be selected from the template list.
#
# Variables such as YMD, HOME, file_dirname and config_dir, and the helpers
# vsopen, vsadd, vsexec and vsget are available as globals here.
#


def get_template():
    return {
        #
        # Sample template definition that consists of 2 files
        #
        "My Simple Template": [
            {
                "path": "sample-filename.txt",
                "body": "sample-content",
            },
            {
                "path": "another-filename.txt",
                "body": "another-content",
            },
        ],

        #
        # Sample template definition that consists of 1 file, with the
        # variable YMD expanded to a string like "20200101" in both the
        # filename and the content.
        #
        # It also defines a hook that opens the created file.
        #
        "My Dynamic Template": [
            {
                "path": f"{YMD}.md",
                "body": f"# {YMD}",
                "hook": lambda path, body: vsopen(path),
            },
        ],
    }
'''
