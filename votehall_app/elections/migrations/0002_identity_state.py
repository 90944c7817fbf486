from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("elections", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="identity",
            name="state",
            field=models.CharField(blank=True, default="", max_length=255),
        ),
    ]
