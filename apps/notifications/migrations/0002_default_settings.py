from django.db import migrations


def create_settings_row(apps, schema_editor):
    NotificationSettings = apps.get_model('notifications', 'NotificationSettings')
    NotificationSettings.objects.get_or_create(pk=1)


class Migration(migrations.Migration):

    dependencies = [
        ('notifications', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_settings_row, migrations.RunPython.noop),
    ]
